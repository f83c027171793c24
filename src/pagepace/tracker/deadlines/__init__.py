"""Deadline management."""

from .manager import DeadlineManager
from .schemas import DeadlineGroups, DeadlineSummary

__all__ = ["DeadlineManager", "DeadlineGroups", "DeadlineSummary"]
