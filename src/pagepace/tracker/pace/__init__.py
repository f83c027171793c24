"""Pace estimation, required pace and urgency."""

from .estimator import PaceEstimator
from .required import days_left, required_pace, required_pace_history, units_per_day
from .schemas import PaceProfile, RequiredPacePoint, UrgencyLevel, UrgencySnapshot
from .urgency import UrgencyClassifier

__all__ = [
    "PaceEstimator",
    "UrgencyClassifier",
    "days_left",
    "required_pace",
    "required_pace_history",
    "units_per_day",
    "PaceProfile",
    "RequiredPacePoint",
    "UrgencyLevel",
    "UrgencySnapshot",
]
