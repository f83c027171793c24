"""Pydantic schemas for deadline overviews."""

from pydantic import BaseModel, Field

from ..db.schemas import DeadlineRecord
from ..pace.schemas import UrgencySnapshot
from ..progress.schemas import RemainingWork


class DeadlineSummary(BaseModel):
    """Everything shown for one deadline in a status listing."""

    deadline: DeadlineRecord
    progress: int = Field(..., ge=0)
    work: RemainingWork
    urgency: UrgencySnapshot
    message: str


class DeadlineGroups(BaseModel):
    """A user's deadlines split by where they stand, each sorted by due date."""

    active: list[DeadlineRecord] = Field(default_factory=list)
    overdue: list[DeadlineRecord] = Field(default_factory=list)
    pending: list[DeadlineRecord] = Field(default_factory=list)
    set_aside: list[DeadlineRecord] = Field(default_factory=list)
    completed: list[DeadlineRecord] = Field(default_factory=list)
    did_not_finish: list[DeadlineRecord] = Field(default_factory=list)

    @property
    def archived(self) -> list[DeadlineRecord]:
        """Completed and abandoned deadlines together."""
        return self.completed + self.did_not_finish
