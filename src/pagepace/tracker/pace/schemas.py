"""Pydantic schemas for pace and urgency results."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UrgencyLevel(str, Enum):
    """How worried a reader should be about a deadline."""

    GOOD = "good"
    APPROACHING = "approaching"
    URGENT = "urgent"
    IMPOSSIBLE = "impossible"
    OVERDUE = "overdue"

    @property
    def severity(self) -> int:
        """Rank for comparisons, 0 (good) to 4 (overdue)."""
        return list(UrgencyLevel).index(self)


class PaceProfile(BaseModel):
    """Observed reading or listening pace over a trailing window."""

    average_per_day: float = Field(0.0, ge=0)
    active_day_count: int = Field(0, ge=0)
    is_reliable: bool = False
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    total_units: int = Field(0, ge=0)
    best_day_units: int = Field(0, ge=0)

    model_config = {"frozen": True}

    @property
    def has_data(self) -> bool:
        return self.active_day_count > 0


class UrgencySnapshot(BaseModel):
    """Urgency of one deadline as evaluated on a given day."""

    level: UrgencyLevel
    days_left: int
    required_pace_today: float = Field(..., ge=0)
    remaining: int = Field(..., ge=0)

    model_config = {"frozen": True}


class RequiredPacePoint(BaseModel):
    """Units per day that were needed as of one logged day."""

    day: date
    units: int = Field(..., ge=0)

    model_config = {"frozen": True}
