"""Historical pace estimation.

Pace is measured over a trailing window of calendar days that ends at the
most recent day with reading activity before the current week. The current
week is left out because it is still partial.
"""

import logging
from datetime import date, timedelta
from typing import Iterable

from ..db.schemas import DeadlineFormat, DeadlineRecord
from ..progress.ledger import ProgressLedger
from .schemas import PaceProfile

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 14
DEFAULT_RELIABLE_MIN_DAYS = 3


class PaceEstimator:
    """Computes average units per active day from ledger history."""

    def __init__(
        self,
        ledger: ProgressLedger,
        window_days: int = DEFAULT_WINDOW_DAYS,
        reliable_min_days: int = DEFAULT_RELIABLE_MIN_DAYS,
        week_start: int = 0,
    ):
        """Initialize pace estimator.

        Args:
            ledger: Progress entries to read from
            window_days: Length of the trailing window in calendar days
            reliable_min_days: Active days needed before pace is trusted
            week_start: First day of the week (0=Monday, 6=Sunday)
        """
        self.ledger = ledger
        self.window_days = window_days
        self.reliable_min_days = reliable_min_days
        self.week_start = week_start

    def current_week_start(self, today: date) -> date:
        """Get the first day of the calendar week containing ``today``."""
        offset = (today.weekday() - self.week_start) % 7
        return today - timedelta(days=offset)

    def estimate(self, deadline_id: str, format: DeadlineFormat, today: date) -> PaceProfile:
        """Estimate pace from a single deadline's history.

        Args:
            deadline_id: Deadline whose ledger is measured
            format: Deadline format; determines the unit of the result
            today: Reference day

        Returns:
            PaceProfile; zero and unreliable when there is no activity
        """
        logger.debug("Estimating %s pace for deadline %s", format.unit.value, deadline_id)
        return self._estimate([deadline_id], today)

    def estimate_for_user(
        self,
        deadlines: Iterable[DeadlineRecord],
        format: DeadlineFormat,
        today: date,
    ) -> PaceProfile:
        """Estimate pace pooled over every deadline sharing ``format``'s unit.

        Physical and ebook pages pool together; audio stands alone. Pass all
        deadlines, archived ones included: finished books are still history.

        Args:
            deadlines: The user's deadlines
            format: Any format of the unit to measure
            today: Reference day

        Returns:
            PaceProfile for that unit
        """
        ids = [d.id for d in deadlines if d.format.unit == format.unit]
        logger.debug("Estimating %s pace over %d deadlines", format.unit.value, len(ids))
        return self._estimate(ids, today)

    def _estimate(self, deadline_ids: list[str], today: date) -> PaceProfile:
        last_eligible_day = self.current_week_start(today) - timedelta(days=1)

        daily: dict[date, int] = {}
        for deadline_id in deadline_ids:
            credited = self.ledger.daily_units(deadline_id, window_end=last_eligible_day)
            for day, units in credited.items():
                daily[day] = daily.get(day, 0) + units

        if not daily:
            return PaceProfile()

        window_end = max(daily)
        window_start = window_end - timedelta(days=self.window_days - 1)
        in_window = {day: units for day, units in daily.items() if day >= window_start}

        active = set()
        for deadline_id in deadline_ids:
            active |= self.ledger.activity_days(deadline_id, window_start, window_end)
        active_days = len(active)
        total = sum(in_window.values())

        return PaceProfile(
            average_per_day=total / max(1, active_days),
            active_day_count=active_days,
            is_reliable=active_days >= self.reliable_min_days,
            window_start=window_start,
            window_end=window_end,
            total_units=total,
            best_day_units=max(in_window.values()),
        )
