"""Database module for local SQLite storage."""

from .models import Deadline, DeadlineStatusChange, ProgressEntry
from .schemas import (
    DeadlineCreate,
    DeadlineFormat,
    DeadlineRecord,
    DeadlineStatus,
    Flexibility,
    ProgressEntryCreate,
    ProgressEntryRecord,
    StatusChangeRecord,
    UnitKind,
)
from .sqlite import Database, get_db

__all__ = [
    "Deadline",
    "DeadlineStatusChange",
    "ProgressEntry",
    "DeadlineCreate",
    "DeadlineFormat",
    "DeadlineRecord",
    "DeadlineStatus",
    "Flexibility",
    "ProgressEntryCreate",
    "ProgressEntryRecord",
    "StatusChangeRecord",
    "UnitKind",
    "Database",
    "get_db",
]
