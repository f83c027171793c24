"""Pydantic schemas for daily targets."""

from pydantic import BaseModel, Field


class DailyTargetSnapshot(BaseModel):
    """Today's goal and today's progress for one format or unit."""

    total_required: int = Field(0, ge=0)
    current_achieved: int = Field(0, ge=0)

    model_config = {"frozen": True}

    @property
    def remaining_today(self) -> int:
        return max(0, self.total_required - self.current_achieved)

    @property
    def is_met(self) -> bool:
        return self.current_achieved >= self.total_required


class OverdueCatchUp(BaseModel):
    """Spare capacity for overdue books after today's active goal.

    ``total`` is the capacity left once active deadlines are covered,
    ``current`` is what was read on overdue books today.
    """

    total: int = Field(0, ge=0)
    current: int = Field(0, ge=0)
    has_capacity: bool = False

    model_config = {"frozen": True}
