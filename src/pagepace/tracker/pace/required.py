"""Required pace helpers.

Required pace is how many units per day are needed from a given day on to
finish by the due date.
"""

import math
from datetime import date

from ..db.schemas import DeadlineRecord
from ..progress.ledger import ProgressLedger
from .schemas import RequiredPacePoint


def days_left(deadline_date: date, today: date) -> int:
    """Whole calendar days until the due date; negative once it has passed."""
    return (deadline_date - today).days


def required_pace(remaining: int, days: int) -> float:
    """Units per day needed to cover ``remaining`` in ``days``.

    Due today or overdue counts as one day.
    """
    return max(0, remaining) / max(1, days)


def units_per_day(total_quantity: int, progress: int, days: int) -> int:
    """Whole units per day needed to finish, used for daily targets.

    Args:
        total_quantity: Target in base units
        progress: Cumulative progress in base units
        days: Days left until the due date

    Returns:
        Everything remaining when due today or overdue, else the ceiling of
        remaining over days left
    """
    remaining = max(0, total_quantity - progress)
    if days <= 0:
        return remaining
    return math.ceil(remaining / days)


def required_pace_history(
    deadline: DeadlineRecord, ledger: ProgressLedger, today: date
) -> list[RequiredPacePoint]:
    """Required pace as it stood on each day that has progress logged.

    Uses the last entry of each day. Days on or after the due date need 0.

    Args:
        deadline: The deadline
        ledger: Ledger holding the deadline's entries
        today: Last day to include

    Returns:
        One point per logged day, oldest first
    """
    last_of_day: dict[date, int] = {}
    for entry in ledger.entries(deadline.id):
        day = entry.created_at.date()
        if day > today:
            break
        last_of_day[day] = entry.current_progress

    points = []
    for day in sorted(last_of_day):
        days = days_left(deadline.deadline_date, day)
        units = units_per_day(deadline.total_quantity, last_of_day[day], days) if days > 0 else 0
        points.append(RequiredPacePoint(day=day, units=units))
    return points
