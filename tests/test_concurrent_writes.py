"""
tests/test_concurrent_writes.py

Parallel writers on one (domain, field, selector) triple and one
(domain, category) pair. Every worker thread uses its own session on a
shared file-backed SQLite database and commits after each write, so the
first insert of the key races across threads.

Coverage
--------
- No increment is lost under concurrent success/failure/discovered writes
- The racing first insert never raises IntegrityError
- Exactly one row exists per key afterwards
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from db.base import Base
from db.models.domain_category import DomainCategory
from db.models.domain_selector import DomainSelector
from db.repositories.category_repository import CategoryRepository
from db.repositories.selector_repository import SelectorRepository
from learning.fields import DiscoveryMethod

WORKERS = 8
ROUNDS = 10


@pytest.fixture()
def file_session_factory(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    engine: Engine = create_engine(
        f"sqlite:///{tmp_path / 'learning.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    finally:
        engine.dispose()


def _run_in_parallel(
    session_factory: sessionmaker[Session],
    write: Callable[[Session, int], None],
) -> None:
    """Start WORKERS threads together; each performs ROUNDS committed writes."""
    start = threading.Barrier(WORKERS)

    def worker(worker_id: int) -> None:
        start.wait()
        for round_no in range(ROUNDS):
            with session_factory() as db:
                write(db, worker_id * ROUNDS + round_no)
                db.commit()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(worker, worker_id) for worker_id in range(WORKERS)]
        # .result() re-raises IntegrityError or any other worker failure
        for future in futures:
            future.result()


class TestConcurrentSelectorWrites:
    def test_mixed_outcomes_are_all_counted(self, file_session_factory) -> None:
        def write(db: Session, n: int) -> None:
            repo = SelectorRepository(db)
            key = {"domain": "www.ikea.pl", "field": "price", "selector": ".price"}
            if n % 3 == 0:
                repo.record_failure(**key)
            elif n % 3 == 1:
                repo.record_success(**key)
            else:
                repo.record_discovered(**key, score=80)

        _run_in_parallel(file_session_factory, write)

        total = WORKERS * ROUNDS
        expected_failures = sum(1 for n in range(total) if n % 3 == 0)
        with file_session_factory() as db:
            rows = db.query(DomainSelector).all()

        assert len(rows) == 1
        assert rows[0].domain == "ikea.pl"
        assert rows[0].failure_count == expected_failures
        assert rows[0].success_count == total - expected_failures
        assert rows[0].discovery_method == DiscoveryMethod.DISCOVERED

    def test_racing_first_insert_creates_one_row(self, file_session_factory) -> None:
        def write(db: Session, n: int) -> None:
            SelectorRepository(db).record_success(domain="agata.pl", field="name", selector="h1")

        _run_in_parallel(file_session_factory, write)

        with file_session_factory() as db:
            rows = db.query(DomainSelector).all()

        assert len(rows) == 1
        assert rows[0].success_count == WORKERS * ROUNDS
        assert rows[0].failure_count == 0


def test_concurrent_category_results_are_all_counted(file_session_factory) -> None:
    def write(db: Session, n: int) -> None:
        CategoryRepository(db).record_result(domain="ikea.pl", category="meble", success=n % 2 == 0)

    _run_in_parallel(file_session_factory, write)

    with file_session_factory() as db:
        rows = db.query(DomainCategory).all()

    assert len(rows) == 1
    assert rows[0].success_count == WORKERS * ROUNDS // 2
    assert rows[0].failure_count == WORKERS * ROUNDS // 2
