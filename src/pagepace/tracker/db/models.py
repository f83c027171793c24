"""SQLAlchemy ORM models for local SQLite database.

Tables:
- deadlines: Books with a target quantity and due date
- deadline_status: Append-only status history of each deadline
- deadline_progress: Cumulative progress entries (the ledger)

Timestamps are stored as ISO strings and parsed back by the pydantic
record schemas.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .schemas import DeadlineFormat, DeadlineStatus, Flexibility


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


class Deadline(Base):
    """Deadline model - a book to finish by a given date."""

    __tablename__ = "deadlines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Book
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(500))
    format: Mapped[str] = mapped_column(String(20), default=DeadlineFormat.PAGES.value)

    # Target
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    deadline_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # ISO date
    flexibility: Mapped[str] = mapped_column(String(10), default=Flexibility.FLEXIBLE.value)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)

    # Relationships
    status_history: Mapped[list["DeadlineStatusChange"]] = relationship(
        "DeadlineStatusChange",
        back_populates="deadline",
        cascade="all, delete-orphan",
        order_by="DeadlineStatusChange.created_at",
    )
    progress_entries: Mapped[list["ProgressEntry"]] = relationship(
        "ProgressEntry", back_populates="deadline", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Deadline(id={self.id}, title='{self.title}', due={self.deadline_date})>"


class DeadlineStatusChange(Base):
    """Status history row - one per status transition."""

    __tablename__ = "deadline_status"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    deadline_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deadlines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=DeadlineStatus.READING.value, nullable=False
    )
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)

    deadline: Mapped["Deadline"] = relationship("Deadline", back_populates="status_history")

    def __repr__(self) -> str:
        return f"<DeadlineStatusChange(deadline_id={self.deadline_id}, status={self.status})>"


class ProgressEntry(Base):
    """Progress entry model - cumulative progress at a point in time."""

    __tablename__ = "deadline_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    deadline_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deadlines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    current_progress: Mapped[int] = mapped_column(Integer, nullable=False)
    time_spent_reading: Mapped[Optional[int]] = mapped_column(Integer)  # minutes
    ignore_in_calcs: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    deadline: Mapped["Deadline"] = relationship("Deadline", back_populates="progress_entries")

    def __repr__(self) -> str:
        return (
            f"<ProgressEntry(id={self.id}, deadline_id={self.deadline_id}, "
            f"progress={self.current_progress})>"
        )
