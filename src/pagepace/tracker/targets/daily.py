"""Daily reading targets.

A day's goal is fixed the first time it is computed. Finishing or archiving
a book later that day does not shrink the goal, while the progress made on
it still counts toward what was achieved.
"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Mapping

from ..db.schemas import DeadlineFormat, DeadlineRecord, UnitKind
from ..pace.required import days_left, units_per_day
from ..progress.ledger import ProgressLedger
from .schemas import DailyTargetSnapshot, OverdueCatchUp

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress_made_today(ledger: ProgressLedger, deadline_id: str, now: datetime) -> int:
    """Progress logged on ``now``'s calendar day up to ``now``, never negative."""
    yesterday = now.date() - timedelta(days=1)
    return max(
        0,
        ledger.progress_as_of(deadline_id, now) - ledger.progress_as_of(deadline_id, yesterday),
    )


class DailyTargetAggregator:
    """Sums per-deadline daily goals into per-format targets.

    Keep one instance for the lifetime of a session: required totals are
    cached per calendar day on the instance.
    """

    def __init__(self):
        self._required_by_day: dict[date, dict[DeadlineFormat, int]] = {}

    def required_for_day(
        self,
        day: date,
        active_at_start_of_day: Iterable[DeadlineRecord],
        ledger: ProgressLedger,
    ) -> dict[DeadlineFormat, int]:
        """Get the goal per format for ``day``, computing it only once.

        Args:
            day: Calendar day
            active_at_start_of_day: Deadlines that were active when the day began
            ledger: Progress entries of those deadlines

        Returns:
            Units required per format
        """
        cached = self._required_by_day.get(day)
        if cached is not None:
            return dict(cached)

        required = {fmt: 0 for fmt in DeadlineFormat}
        for deadline in active_at_start_of_day:
            start = ledger.progress_at_start_of_day(deadline.id, day)
            days = days_left(deadline.deadline_date, day)
            required[deadline.format] += units_per_day(deadline.total_quantity, start, days)

        logger.debug("Fixed daily goal for %s: %s", day, required)
        self._required_by_day[day] = required
        return dict(required)

    def snapshot_for_today(
        self,
        active_at_start_of_day: Iterable[DeadlineRecord],
        all_including_archived_today: Iterable[DeadlineRecord],
        ledger: ProgressLedger,
        now: datetime,
    ) -> dict[DeadlineFormat, DailyTargetSnapshot]:
        """Build today's target snapshot for every format.

        Args:
            active_at_start_of_day: Deadlines the goal is built from
            all_including_archived_today: Deadlines whose progress today counts,
                including ones archived since the day began
            ledger: Progress entries of all of the above
            now: Current moment

        Returns:
            Snapshot per format; unused formats map to zeros
        """
        required = self.required_for_day(now.date(), active_at_start_of_day, ledger)

        achieved = {fmt: 0 for fmt in DeadlineFormat}
        for deadline in all_including_archived_today:
            achieved[deadline.format] += progress_made_today(ledger, deadline.id, now)

        return {
            fmt: DailyTargetSnapshot(total_required=required[fmt], current_achieved=achieved[fmt])
            for fmt in DeadlineFormat
        }


def combined(
    snapshots: Mapping[DeadlineFormat, DailyTargetSnapshot], unit: UnitKind
) -> DailyTargetSnapshot:
    """Merge per-format snapshots that share a unit."""
    matching = [snap for fmt, snap in snapshots.items() if fmt.unit == unit]
    return DailyTargetSnapshot(
        total_required=sum(s.total_required for s in matching),
        current_achieved=sum(s.current_achieved for s in matching),
    )


def overdue_catch_up(
    overdue: Iterable[DeadlineRecord],
    user_pace: float,
    todays_goal: int,
    todays_progress: int,
    progress_today: Callable[[DeadlineRecord], int],
) -> OverdueCatchUp:
    """Work out how much of the reader's usual pace is free for overdue books.

    Args:
        overdue: Overdue deadlines of one unit
        user_pace: Average units per day in that unit
        todays_goal: Today's goal for active deadlines
        todays_progress: Progress made on active deadlines today
        progress_today: Returns today's progress for a deadline

    Returns:
        OverdueCatchUp with capacity and progress, both rounded
    """
    extra = max(0.0, user_pace - todays_goal)
    used = max(0, todays_progress - todays_goal)
    available = max(0.0, extra - used)

    current = sum(max(0, progress_today(deadline)) for deadline in overdue)

    return OverdueCatchUp(
        total=_round_half_up(available),
        current=current,
        has_capacity=available > 0,
    )
