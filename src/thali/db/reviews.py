"""Day and week review persistence helpers."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select

from thali.models.context import DayReview, WeekReview

from .models import DayReviewORM, WeekReviewORM
from .repository import session_scope


def _to_model(row: DayReviewORM) -> DayReview:
    return DayReview.model_validate(
        {
            "date": row.date,
            "variety": row.variety,
            "effort": row.effort,
            "satisfaction": row.satisfaction,
            "notes": row.notes,
        }
    )


def list_day_reviews(since: date, limit: int = 7) -> List[DayReview]:
    """Return reviews dated on or after ``since``, newest first."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(DayReviewORM)
                .where(DayReviewORM.date >= since)
                .order_by(DayReviewORM.date.desc())
                .limit(limit)
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def get_day_review(review_date: date) -> Optional[DayReview]:
    with session_scope() as session:
        row = session.execute(
            select(DayReviewORM).where(DayReviewORM.date == review_date)
        ).scalar_one_or_none()
        if row is None:
            return None
        return _to_model(row)


def save_day_review(review: DayReview) -> DayReview:
    """Create or replace the review for ``review.date``."""

    with session_scope() as session:
        row = session.execute(
            select(DayReviewORM).where(DayReviewORM.date == review.date)
        ).scalar_one_or_none()
        if row is None:
            row = DayReviewORM(date=review.date)
            session.add(row)
        row.variety = review.variety
        row.effort = review.effort
        row.satisfaction = review.satisfaction
        row.notes = review.notes
        session.flush()
        return _to_model(row)


def _week_to_model(row: WeekReviewORM) -> WeekReview:
    return WeekReview.model_validate(
        {
            "week_start": row.week_start,
            "variety_balance": row.variety_balance,
            "effort_vs_satisfaction": row.effort_vs_satisfaction,
            "highlights": row.highlights,
            "improvements": row.improvements,
            "notes": row.notes,
        }
    )


def get_week_review(week_start: date) -> Optional[WeekReview]:
    with session_scope() as session:
        row = session.execute(
            select(WeekReviewORM).where(WeekReviewORM.week_start == week_start)
        ).scalar_one_or_none()
        if row is None:
            return None
        return _week_to_model(row)


def save_week_review(review: WeekReview) -> WeekReview:
    """Create or replace the review for the week starting ``review.week_start``."""

    with session_scope() as session:
        row = session.execute(
            select(WeekReviewORM).where(WeekReviewORM.week_start == review.week_start)
        ).scalar_one_or_none()
        if row is None:
            row = WeekReviewORM(week_start=review.week_start)
            session.add(row)
        row.variety_balance = review.variety_balance
        row.effort_vs_satisfaction = review.effort_vs_satisfaction
        row.highlights = review.highlights
        row.improvements = review.improvements
        row.notes = review.notes
        session.flush()
        return _week_to_model(row)


__all__ = [
    "list_day_reviews",
    "get_day_review",
    "save_day_review",
    "get_week_review",
    "save_week_review",
]
