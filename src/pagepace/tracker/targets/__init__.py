"""Daily targets and overdue catch-up."""

from .daily import DailyTargetAggregator, combined, overdue_catch_up, progress_made_today
from .schemas import DailyTargetSnapshot, OverdueCatchUp

__all__ = [
    "DailyTargetAggregator",
    "combined",
    "overdue_catch_up",
    "progress_made_today",
    "DailyTargetSnapshot",
    "OverdueCatchUp",
]
