"""Pytest configuration and shared fixtures.

This module provides fixtures for testing pagepace: an in-memory database,
fixed reference times, and factories for deadlines and progress entries.
"""

import os
from datetime import date, datetime, timedelta
from itertools import count
from typing import Callable, Generator, Optional

import pytest

from pagepace.tracker.config import Config, reset_config
from pagepace.tracker.db.schemas import (
    DeadlineCreate,
    DeadlineFormat,
    DeadlineRecord,
    DeadlineStatus,
    Flexibility,
    ProgressEntryRecord,
    StatusChangeRecord,
)
from pagepace.tracker.db.sqlite import Database, reset_db


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def today() -> date:
    """A fixed Wednesday."""
    return date(2025, 3, 12)


@pytest.fixture
def now(today: date) -> datetime:
    """Mid-morning on the fixed day."""
    return datetime.combine(today, datetime.min.time()).replace(hour=9)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Generator[Database, None, None]:
    """Create an in-memory test database."""
    reset_db()
    reset_config()

    database = Database(":memory:")
    database.create_tables()
    yield database

    reset_db()
    reset_config()


@pytest.fixture
def config(tmp_path) -> Config:
    """Configuration with default policy values."""
    return Config(
        db_path=tmp_path / "pagepace.db",
        user_id="local",
        impossible_factor=2.5,
        urgent_days=3,
        pace_window_days=14,
        reliable_min_days=3,
        week_start=0,
        log_level="WARNING",
    )


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove PAGEPACE_* variables for the duration of a test."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("PAGEPACE_")}
    for key in saved:
        del os.environ[key]
    reset_config()
    yield
    for key in [k for k in os.environ if k.startswith("PAGEPACE_")]:
        del os.environ[key]
    os.environ.update(saved)
    reset_config()


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_entry() -> Callable[..., ProgressEntryRecord]:
    """Build progress entry records without a database."""
    ids = count(1)

    def _make(
        progress: int,
        at: datetime,
        deadline_id: str = "d1",
        baseline: bool = False,
        entry_id: Optional[str] = None,
    ) -> ProgressEntryRecord:
        return ProgressEntryRecord(
            id=entry_id or f"e{next(ids):03d}",
            deadline_id=deadline_id,
            current_progress=progress,
            created_at=at,
            ignore_in_calcs=baseline,
        )

    return _make


@pytest.fixture
def make_deadline(now: datetime) -> Callable[..., DeadlineRecord]:
    """Build deadline records without a database."""

    def _make(
        deadline_id: str = "d1",
        total: int = 300,
        due: Optional[date] = None,
        format: DeadlineFormat = DeadlineFormat.PAGES,
        flexibility: Flexibility = Flexibility.FLEXIBLE,
        statuses: Optional[list[tuple[DeadlineStatus, datetime]]] = None,
        created_at: Optional[datetime] = None,
    ) -> DeadlineRecord:
        created = created_at or now - timedelta(days=30)
        history = statuses if statuses is not None else [(DeadlineStatus.READING, created)]
        return DeadlineRecord(
            id=deadline_id,
            user_id="local",
            title=f"Book {deadline_id}",
            format=format,
            total_quantity=total,
            deadline_date=due or now.date() + timedelta(days=10),
            flexibility=flexibility,
            created_at=created,
            status_history=[
                StatusChangeRecord(status=status, created_at=at) for status, at in history
            ],
        )

    return _make


@pytest.fixture
def deadline_data(today: date) -> DeadlineCreate:
    """Deadline creation data for a 300 page book due in ten days."""
    return DeadlineCreate(
        title="The Left Hand of Darkness",
        author="Ursula K. Le Guin",
        format=DeadlineFormat.PAGES,
        total_quantity=300,
        deadline_date=today + timedelta(days=10),
    )
