"""Pydantic schemas for values derived from a progress ledger."""

from pydantic import BaseModel, Field

from ..db.schemas import ProgressEntryRecord


class RemainingWork(BaseModel):
    """Work left on a deadline as of a given moment."""

    remaining: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)

    model_config = {"frozen": True}

    @property
    def is_done(self) -> bool:
        return self.remaining == 0


class CorrectionResult(BaseModel):
    """Outcome of moving a deadline's progress backward."""

    deleted_entry_ids: list[str] = Field(default_factory=list)
    inserted_entry: ProgressEntryRecord

    model_config = {"frozen": True}
