"""Remaining work and completion percentage for a deadline."""

import math

from ..db.schemas import DeadlineRecord
from .ledger import Cutoff, ProgressLedger
from .schemas import RemainingWork


def remaining_work(total_quantity: int, progress: int) -> RemainingWork:
    """Compute remaining work from a total and a cumulative progress value.

    Args:
        total_quantity: Target in base units (always > 0 for a stored deadline)
        progress: Cumulative progress in base units

    Returns:
        RemainingWork; the percentage is floored and clamped to 0-100
    """
    remaining = max(0, total_quantity - progress)
    percentage = math.floor(100 * progress / total_quantity)
    return RemainingWork(remaining=remaining, percentage=min(100, max(0, percentage)))


class RemainingWorkCalculator:
    """Derives remaining work for deadlines from a ledger snapshot."""

    def __init__(self, ledger: ProgressLedger):
        """Initialize calculator.

        Args:
            ledger: Progress entries to read from
        """
        self.ledger = ledger

    def compute(self, deadline: DeadlineRecord, as_of: Cutoff) -> RemainingWork:
        """Get remaining work for a deadline as of a moment.

        Args:
            deadline: The deadline
            as_of: Inclusive cutoff; a plain date means the end of that day

        Returns:
            RemainingWork for the deadline
        """
        progress = self.ledger.progress_as_of(deadline.id, as_of)
        return remaining_work(deadline.total_quantity, progress)
