from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import inspect

from thali.db.models import Base
from thali.db.repository import get_engine, session_scope
from thali.db.storage import SqlStorage


def test_concurrent_first_use_builds_one_engine_with_full_schema():
    workers = 8
    barrier = threading.Barrier(workers)

    def _open():
        barrier.wait()
        engine = get_engine()
        return engine, set(inspect(engine).get_table_names())

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: _open(), range(workers)))

    engines = {id(engine) for engine, _ in results}
    assert len(engines) == 1
    expected = set(Base.metadata.tables)
    assert all(tables >= expected for _, tables in results)


def test_parallel_reads_on_fresh_database_see_every_table():
    storage = SqlStorage()
    calls = [
        storage.list_inventory,
        lambda: storage.get_preference("dailyCalorieGoal"),
        storage.list_shopping_items,
    ] * 3
    barrier = threading.Barrier(len(calls))

    def _run(call):
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        results = list(pool.map(_run, calls))

    assert results == [[], None, []] * 3
    with session_scope() as session:
        assert session.bind is get_engine()
