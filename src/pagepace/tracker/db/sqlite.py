"""SQLite database operations.

Handles database connection, session management, and the persistence
operations the calculation engine relies on. Everything returned from here
is a pydantic record, never a live ORM object.
"""

import logging
import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator, Iterable, Optional

from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from ..errors import PersistenceError
from .models import Base, Deadline, DeadlineStatusChange, ProgressEntry
from .schemas import (
    DeadlineCreate,
    DeadlineRecord,
    DeadlineStatus,
    ProgressEntryCreate,
    ProgressEntryRecord,
    StatusChangeRecord,
)

logger = logging.getLogger(__name__)


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses
                     PAGEPACE_DB_PATH env var or default location.
        """
        if db_path is None:
            db_path = os.environ.get(
                "PAGEPACE_DB_PATH",
                str(Path.home() / ".pagepace" / "pagepace.db"),
            )

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        The session commits on success. Any failure rolls back the whole
        unit of work; SQLAlchemy errors surface as PersistenceError.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed, rolled back: %s", e)
            raise PersistenceError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # Deadline Operations
    # ========================================================================

    def create_deadline(self, deadline: DeadlineCreate, created_at: datetime) -> DeadlineRecord:
        """Create a new deadline with its initial status.

        Args:
            deadline: Validated deadline data
            created_at: Creation timestamp, also used for the first status

        Returns:
            The stored deadline
        """
        with self.get_session() as s:
            db_deadline = Deadline(
                user_id=deadline.user_id,
                title=deadline.title,
                author=deadline.author,
                format=deadline.format.value,
                total_quantity=deadline.total_quantity,
                deadline_date=deadline.deadline_date.isoformat(),
                flexibility=deadline.flexibility.value,
                created_at=created_at.isoformat(),
            )
            db_deadline.status_history.append(
                DeadlineStatusChange(
                    status=deadline.status.value,
                    created_at=created_at.isoformat(),
                )
            )
            s.add(db_deadline)
            s.flush()

            logger.info("Created deadline %s (%s)", db_deadline.id, db_deadline.title)
            return DeadlineRecord.model_validate(db_deadline)

    def load_deadline(self, deadline_id: str) -> Optional[DeadlineRecord]:
        """Get a deadline by ID, with its status history."""
        with self.get_session() as s:
            stmt = (
                select(Deadline)
                .where(Deadline.id == deadline_id)
                .options(selectinload(Deadline.status_history))
            )
            db_deadline = s.execute(stmt).scalar_one_or_none()
            if db_deadline is None:
                return None
            return DeadlineRecord.model_validate(db_deadline)

    def load_deadlines(self, user_id: str) -> list[DeadlineRecord]:
        """Get every deadline of a user, archived ones included."""
        with self.get_session() as s:
            stmt = (
                select(Deadline)
                .where(Deadline.user_id == user_id)
                .options(selectinload(Deadline.status_history))
                .order_by(Deadline.deadline_date, Deadline.created_at)
            )
            return [
                DeadlineRecord.model_validate(d) for d in s.execute(stmt).scalars().all()
            ]

    def load_active_deadlines(
        self, user_id: str, as_of: Optional[datetime] = None
    ) -> list[DeadlineRecord]:
        """Get deadlines whose latest status is active.

        Args:
            user_id: Owner of the deadlines
            as_of: Evaluate the status history as it stood at this moment
        """
        return [d for d in self.load_deadlines(user_id) if d.is_active(as_of)]

    def add_status(
        self, deadline_id: str, status: DeadlineStatus, created_at: datetime
    ) -> StatusChangeRecord:
        """Append a status change to a deadline's history."""
        with self.get_session() as s:
            if s.get(Deadline, deadline_id) is None:
                raise PersistenceError(f"Deadline not found: {deadline_id}")

            change = DeadlineStatusChange(
                deadline_id=deadline_id,
                status=status.value,
                created_at=created_at.isoformat(),
            )
            s.add(change)
            s.flush()

            logger.info("Deadline %s status -> %s", deadline_id, status.value)
            return StatusChangeRecord.model_validate(change)

    # ========================================================================
    # Progress Entry Operations
    # ========================================================================

    def _new_progress_row(self, entry: ProgressEntryCreate) -> ProgressEntry:
        row = ProgressEntry(
            deadline_id=entry.deadline_id,
            current_progress=entry.current_progress,
            time_spent_reading=entry.time_spent_reading,
            ignore_in_calcs=entry.ignore_in_calcs,
            created_at=entry.created_at.isoformat(),
        )
        if entry.id:
            row.id = entry.id
        return row

    def add_progress_entry(self, entry: ProgressEntryCreate) -> ProgressEntryRecord:
        """Append a progress entry to a deadline's ledger."""
        with self.get_session() as s:
            if s.get(Deadline, entry.deadline_id) is None:
                raise PersistenceError(f"Deadline not found: {entry.deadline_id}")

            row = self._new_progress_row(entry)
            s.add(row)
            s.flush()

            logger.debug(
                "Logged progress %s for deadline %s", row.current_progress, row.deadline_id
            )
            return ProgressEntryRecord.model_validate(row)

    def load_progress_entries(self, deadline_id: str) -> list[ProgressEntryRecord]:
        """Get all progress entries for a deadline, oldest first."""
        return self.load_progress_entries_for([deadline_id])

    def load_progress_entries_for(
        self, deadline_ids: Iterable[str]
    ) -> list[ProgressEntryRecord]:
        """Get the progress entries of several deadlines in one read."""
        ids = list(deadline_ids)
        if not ids:
            return []

        with self.get_session() as s:
            stmt = (
                select(ProgressEntry)
                .where(ProgressEntry.deadline_id.in_(ids))
                .order_by(ProgressEntry.created_at, ProgressEntry.id)
            )
            return [
                ProgressEntryRecord.model_validate(row)
                for row in s.execute(stmt).scalars().all()
            ]

    def replace_entries(
        self,
        deadline_id: str,
        delete_ids: list[str],
        insert_entry: ProgressEntryCreate,
    ) -> ProgressEntryRecord:
        """Delete some entries and insert one, as a single transaction.

        Either every listed entry is gone and the new one exists, or nothing
        changed at all.

        Args:
            deadline_id: Deadline whose ledger is rewritten
            delete_ids: Entries to remove; all must belong to the deadline
            insert_entry: Entry to add once the deletions succeeded

        Returns:
            The inserted entry

        Raises:
            PersistenceError: If any step fails; the ledger is unchanged
        """
        if insert_entry.deadline_id != deadline_id:
            raise PersistenceError(
                f"Entry belongs to {insert_entry.deadline_id}, not {deadline_id}"
            )

        with self.get_session() as s:
            if delete_ids:
                result = s.execute(
                    delete(ProgressEntry)
                    .where(ProgressEntry.deadline_id == deadline_id)
                    .where(ProgressEntry.id.in_(delete_ids))
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != len(set(delete_ids)):
                    raise PersistenceError(
                        f"Expected to delete {len(set(delete_ids))} entries "
                        f"for {deadline_id}, matched {result.rowcount}"
                    )

            row = self._new_progress_row(insert_entry)
            s.add(row)
            s.flush()

            logger.info(
                "Replaced %d entries of deadline %s with progress %s",
                len(delete_ids),
                deadline_id,
                row.current_progress,
            )
            return ProgressEntryRecord.model_validate(row)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
