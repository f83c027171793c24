"""Progress ledger, remaining work and backward corrections."""

from .corrector import BackwardProgressCorrector
from .ledger import ProgressLedger
from .remaining import RemainingWorkCalculator, remaining_work
from .schemas import CorrectionResult, RemainingWork

__all__ = [
    "BackwardProgressCorrector",
    "ProgressLedger",
    "RemainingWorkCalculator",
    "remaining_work",
    "CorrectionResult",
    "RemainingWork",
]
