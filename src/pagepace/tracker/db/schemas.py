"""Pydantic schemas for data validation.

These schemas define deadlines, their status history and progress
entries. The ``*Record`` schemas are the immutable values handed to the
calculation engine; they are built from ORM rows with ``from_attributes``.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UnitKind(str, Enum):
    """Base unit a deadline is measured in."""

    PAGES = "pages"
    MINUTES = "minutes"


class DeadlineFormat(str, Enum):
    """Format of the book behind a deadline."""

    PAGES = "pages"  # Physical book
    EBOOK_PAGES = "ebook-pages"
    AUDIO_MINUTES = "audio-minutes"

    @property
    def unit(self) -> UnitKind:
        """Base unit for this format. Both page formats share one unit."""
        if self is DeadlineFormat.AUDIO_MINUTES:
            return UnitKind.MINUTES
        return UnitKind.PAGES

    @property
    def is_audio(self) -> bool:
        return self is DeadlineFormat.AUDIO_MINUTES


class Flexibility(str, Enum):
    """How firm the due date is."""

    FLEXIBLE = "flexible"
    STRICT = "strict"  # Library loan, review copy, book club


class DeadlineStatus(str, Enum):
    """Lifecycle status of a deadline."""

    PENDING = "pending"
    READING = "reading"
    PAUSED = "paused"
    COMPLETE = "complete"
    DID_NOT_FINISH = "did_not_finish"
    TO_REVIEW = "to_review"
    APPLIED = "applied"
    WITHDREW = "withdrew"
    REJECTED = "rejected"


# Only these statuses take part in pace, urgency and daily targets
ACTIVE_STATUSES = frozenset({DeadlineStatus.READING})

# Soft-deleted deadlines
ARCHIVED_STATUSES = frozenset({DeadlineStatus.COMPLETE, DeadlineStatus.DID_NOT_FINISH})


# ============================================================================
# Status History Schemas
# ============================================================================


class StatusChangeRecord(BaseModel):
    """A single entry of a deadline's status history."""

    status: DeadlineStatus
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


# ============================================================================
# Deadline Schemas
# ============================================================================


class DeadlineBase(BaseModel):
    """Base deadline fields common to create/read operations."""

    title: str = Field(..., min_length=1, description="Book title")
    author: Optional[str] = None
    format: DeadlineFormat = Field(default=DeadlineFormat.PAGES)
    total_quantity: int = Field(..., gt=0, description="Pages, or minutes for audio")
    deadline_date: date
    flexibility: Flexibility = Field(default=Flexibility.FLEXIBLE)


class DeadlineCreate(DeadlineBase):
    """Schema for creating a new deadline."""

    user_id: str = Field("local", min_length=1)
    status: DeadlineStatus = Field(default=DeadlineStatus.READING)


class DeadlineRecord(DeadlineBase):
    """A stored deadline together with its status history."""

    id: str
    user_id: str
    created_at: datetime
    status_history: list[StatusChangeRecord] = Field(default_factory=list)

    model_config = {"from_attributes": True, "frozen": True}

    def latest_status(self, as_of: Optional[datetime] = None) -> DeadlineStatus:
        """Get the newest status, optionally as it stood at ``as_of``.

        Args:
            as_of: Only consider history recorded at or before this moment

        Returns:
            Latest status, READING when there is no history yet
        """
        history = [
            (change.created_at, index, change.status)
            for index, change in enumerate(self.status_history)
            if as_of is None or change.created_at <= as_of
        ]
        if not history:
            return DeadlineStatus.READING
        return max(history)[2]

    def is_active(self, as_of: Optional[datetime] = None) -> bool:
        """Check if the deadline counts toward pace and daily targets."""
        return self.latest_status(as_of) in ACTIVE_STATUSES

    def is_archived(self, as_of: Optional[datetime] = None) -> bool:
        """Check if the deadline has been completed or abandoned."""
        return self.latest_status(as_of) in ARCHIVED_STATUSES


# ============================================================================
# Progress Entry Schemas
# ============================================================================


class ProgressEntryBase(BaseModel):
    """Base progress entry fields."""

    deadline_id: str
    current_progress: int = Field(..., ge=0, description="Cumulative, in base unit")
    created_at: datetime
    time_spent_reading: Optional[int] = Field(None, ge=0, description="Minutes")
    ignore_in_calcs: bool = Field(False, description="Baseline entry, not reading activity")


class ProgressEntryCreate(ProgressEntryBase):
    """Schema for creating a progress entry."""

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty ids as missing so the database generates one."""
        if v is None:
            return None
        v = str(v).strip()
        return v if v else None


class ProgressEntryRecord(ProgressEntryBase):
    """A stored progress entry."""

    id: str

    model_config = {"from_attributes": True, "frozen": True}
