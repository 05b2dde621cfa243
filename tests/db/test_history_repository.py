from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from thali.db.history import list_history, record_meal, sum_calories, update_meal
from thali.db.reviews import get_day_review, list_day_reviews, save_day_review
from thali.errors import NotFoundError
from thali.models.context import DayReview, MealHistoryEntry

MORNING = datetime(2025, 3, 12, 8, 30)


def _record(name: str, eaten_at: datetime, **kwargs) -> MealHistoryEntry:
    return record_meal(
        MealHistoryEntry(meal_name=name, cuisine="indian", meal_type="lunch", eaten_at=eaten_at, **kwargs)
    )


def test_list_history_window_and_filters():
    _record("Poha", MORNING, calories=350)
    _record("Rajma Chawal", MORNING + timedelta(hours=5), rating=5, calories=650)
    _record("Maggi", MORNING - timedelta(days=1), rating=2)

    today = list_history(datetime(2025, 3, 12), datetime(2025, 3, 13))
    assert [entry.meal_name for entry in today] == ["Rajma Chawal", "Poha"]

    rated = list_history(MORNING - timedelta(days=7), rated_only=True)
    assert [entry.meal_name for entry in rated] == ["Rajma Chawal", "Maggi"]

    unrated = list_history(MORNING - timedelta(days=7), unrated_only=True)
    assert [entry.meal_name for entry in unrated] == ["Poha"]

    assert sum_calories(datetime(2025, 3, 12), datetime(2025, 3, 13)) == 1000
    assert sum_calories(datetime(2025, 3, 11), datetime(2025, 3, 12)) == 0


def test_update_meal_sets_rating_and_notes():
    entry = _record("Upma", MORNING)

    rated = update_meal(entry.id, rating=4)
    assert rated.rating == 4
    assert rated.notes is None

    noted = update_meal(entry.id, notes="needed more salt")
    assert (noted.rating, noted.notes) == (4, "needed more salt")

    with pytest.raises(NotFoundError):
        update_meal(12345, rating=3)


def test_day_reviews_upsert_by_date():
    save_day_review(DayReview(date=date(2025, 3, 10), variety=5, effort=5, satisfaction=5))
    save_day_review(DayReview(date=date(2025, 3, 11), variety=2, effort=7, satisfaction=3))
    save_day_review(DayReview(date=date(2025, 3, 11), variety=8, effort=2, satisfaction=9, notes="better"))

    reviews = list_day_reviews(date(2025, 3, 1))

    assert [review.date for review in reviews] == [date(2025, 3, 11), date(2025, 3, 10)]
    assert get_day_review(date(2025, 3, 11)).notes == "better"
    assert get_day_review(date(2025, 3, 12)) is None
    assert len(list_day_reviews(date(2025, 3, 1), limit=1)) == 1
