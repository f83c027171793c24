"""Backward progress correction.

When a reader lowers their progress (a typo, a re-read, a reset), every
entry above the new value is removed and a single entry with the new value
is written at ``now``. Both steps go through one ``replace_entries`` call so
no reader ever sees a half-corrected ledger.
"""

import logging
from datetime import datetime
from typing import Optional

from ..db.schemas import ProgressEntryCreate, ProgressEntryRecord
from ..db.sqlite import Database, get_db
from ..errors import ValidationError
from .ledger import ProgressLedger
from .schemas import CorrectionResult

logger = logging.getLogger(__name__)


def entries_to_remove(
    entries: tuple[ProgressEntryRecord, ...], new_progress: int, now: datetime
) -> list[ProgressEntryRecord]:
    """Pick the entries a correction to ``new_progress`` supersedes.

    That is every entry above the new value, and every entry stamped at or
    after ``now`` (the corrected entry becomes the latest one).

    Returns:
        Entries ordered newest first
    """
    doomed = [
        entry
        for entry in entries
        if entry.current_progress > new_progress or entry.created_at >= now
    ]
    return sorted(doomed, key=lambda e: (e.created_at, e.id), reverse=True)


class BackwardProgressCorrector:
    """Moves a deadline's progress backward atomically."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize corrector.

        Args:
            db: Database providing load_progress_entries and replace_entries
        """
        self.db = db or get_db()

    def apply(self, deadline_id: str, new_progress: int, now: datetime) -> CorrectionResult:
        """Correct a deadline's progress down to ``new_progress``.

        Args:
            deadline_id: Deadline to correct
            new_progress: New cumulative progress, lower than the current one
            now: Timestamp for the corrected entry

        Returns:
            CorrectionResult with the removed ids and the inserted entry

        Raises:
            ValidationError: If the value is negative or not below current progress
            PersistenceError: If the store fails; the ledger is left unchanged
        """
        if new_progress < 0:
            raise ValidationError(f"Progress cannot be negative: {new_progress}")

        ledger = ProgressLedger(self.db.load_progress_entries(deadline_id))
        current = ledger.progress_as_of(deadline_id, now)

        if new_progress >= current:
            logger.warning(
                "Rejected correction of %s: %s is not below current progress %s",
                deadline_id,
                new_progress,
                current,
            )
            raise ValidationError(
                f"Correction must go below current progress {current}, got {new_progress}"
            )

        doomed = entries_to_remove(ledger.entries(deadline_id), new_progress, now)
        delete_ids = [entry.id for entry in doomed]

        inserted = self.db.replace_entries(
            deadline_id,
            delete_ids,
            ProgressEntryCreate(
                deadline_id=deadline_id,
                current_progress=new_progress,
                created_at=now,
                ignore_in_calcs=False,
            ),
        )

        logger.info(
            "Corrected %s from %s to %s, removed %d entries",
            deadline_id,
            current,
            new_progress,
            len(delete_ids),
        )
        return CorrectionResult(deleted_entry_ids=delete_ids, inserted_entry=inserted)
