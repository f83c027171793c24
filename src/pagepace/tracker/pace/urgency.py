"""Urgency classification for deadlines.

Rules are evaluated in order and the first match wins:

    overdue      due date has passed
    good         nothing left to read
    impossible   strict deadline needing more than ``impossible_factor``
                 times the reader's best day (reliable pace only)
    urgent       due today
    good         pace is not reliable yet
    urgent       behind pace with ``urgent_days`` or fewer left
    approaching  behind pace
    good         otherwise

The impossible rule runs before the due-today rule so that shrinking the
days left never moves a deadline toward a calmer level.
"""

from datetime import date

from ..db.schemas import DeadlineFormat, DeadlineRecord, Flexibility
from ..progress.schemas import RemainingWork
from ..units.converter import format_pace
from .required import days_left as days_until
from .required import required_pace
from .schemas import PaceProfile, UrgencyLevel, UrgencySnapshot

DEFAULT_IMPOSSIBLE_FACTOR = 2.5
DEFAULT_URGENT_DAYS = 3


def _per_day(format: DeadlineFormat, units: float) -> str:
    return format_pace(format, units).replace("/day", "")


class UrgencyClassifier:
    """Maps remaining work, days left and pace to an urgency level."""

    def __init__(
        self,
        impossible_factor: float = DEFAULT_IMPOSSIBLE_FACTOR,
        urgent_days: int = DEFAULT_URGENT_DAYS,
    ):
        """Initialize classifier.

        Args:
            impossible_factor: Multiple of the best day beyond which a strict
                deadline is considered impossible
            urgent_days: Days left at or below which falling behind is urgent
        """
        self.impossible_factor = impossible_factor
        self.urgent_days = urgent_days

    def classify_level(
        self,
        days_left: int,
        remaining: int,
        required: float,
        pace: PaceProfile,
        flexibility: Flexibility,
    ) -> UrgencyLevel:
        """Pick the urgency level for already computed inputs."""
        if days_left < 0:
            return UrgencyLevel.OVERDUE
        if remaining <= 0:
            return UrgencyLevel.GOOD

        if (
            pace.is_reliable
            and pace.best_day_units > 0
            and flexibility == Flexibility.STRICT
            and required > self.impossible_factor * pace.best_day_units
        ):
            return UrgencyLevel.IMPOSSIBLE

        if days_left == 0:
            return UrgencyLevel.URGENT
        if not pace.is_reliable:
            return UrgencyLevel.GOOD

        if required > pace.average_per_day:
            if days_left <= self.urgent_days:
                return UrgencyLevel.URGENT
            return UrgencyLevel.APPROACHING

        return UrgencyLevel.GOOD

    def classify(
        self,
        deadline: DeadlineRecord,
        work: RemainingWork,
        pace: PaceProfile,
        today: date,
    ) -> UrgencySnapshot:
        """Classify a deadline as of ``today``.

        Args:
            deadline: The deadline
            work: Remaining work as of today
            pace: The reader's historical pace in the deadline's unit
            today: Reference day

        Returns:
            UrgencySnapshot with the level and the figures behind it
        """
        days = days_until(deadline.deadline_date, today)
        required = required_pace(work.remaining, days)
        level = self.classify_level(days, work.remaining, required, pace, deadline.flexibility)
        return UrgencySnapshot(
            level=level,
            days_left=days,
            required_pace_today=required,
            remaining=work.remaining,
        )

    def describe(
        self, snapshot: UrgencySnapshot, pace: PaceProfile, format: DeadlineFormat
    ) -> str:
        """Get a short status message for a snapshot."""
        level = snapshot.level
        required = _per_day(format, snapshot.required_pace_today)

        if level == UrgencyLevel.OVERDUE:
            return "Return or renew"
        if level == UrgencyLevel.IMPOSSIBLE:
            return f"Current: {_per_day(format, pace.average_per_day)} vs Required: {required}"
        if level == UrgencyLevel.URGENT:
            return "Tough timeline"
        if level == UrgencyLevel.APPROACHING:
            gap = snapshot.required_pace_today - pace.average_per_day
            return f"Read ~{format_pace(format, gap)} more"

        if snapshot.remaining == 0:
            return "Finished"
        if not pace.is_reliable:
            return "On track (default pace)"
        return f"On track at {_per_day(format, pace.average_per_day)}/day"
