"""Read-only view over progress entries.

A ledger holds the entries of one or more deadlines, each deadline's
entries ordered by (created_at, id). It never changes after construction,
so every answer computed from one instance comes from the same snapshot.

Baseline entries (``ignore_in_calcs``) record where the reader started.
They count toward progress but are never reading activity.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from ..db.schemas import ProgressEntryRecord

Cutoff = Union[date, datetime]


def _order_key(entry: ProgressEntryRecord) -> tuple:
    return (entry.created_at, entry.id)


def _qualifies(entry: ProgressEntryRecord, cutoff: Cutoff) -> bool:
    # datetime is a subclass of date, so test it first
    if isinstance(cutoff, datetime):
        return entry.created_at <= cutoff
    return entry.created_at.date() <= cutoff


class ProgressLedger:
    """Ordered progress history for a set of deadlines."""

    def __init__(self, entries: Iterable[ProgressEntryRecord] = ()):
        """Build a ledger snapshot.

        Args:
            entries: Progress entries of any number of deadlines, any order
        """
        grouped: dict[str, list[ProgressEntryRecord]] = defaultdict(list)
        for entry in entries:
            grouped[entry.deadline_id].append(entry)

        self._entries: dict[str, tuple[ProgressEntryRecord, ...]] = {
            deadline_id: tuple(sorted(group, key=_order_key))
            for deadline_id, group in grouped.items()
        }

    def __len__(self) -> int:
        return sum(len(group) for group in self._entries.values())

    def deadline_ids(self) -> list[str]:
        """Get the ids of deadlines that have at least one entry."""
        return sorted(self._entries)

    def entries(self, deadline_id: str) -> tuple[ProgressEntryRecord, ...]:
        """Get a deadline's entries, oldest first."""
        return self._entries.get(deadline_id, ())

    def progress_as_of(self, deadline_id: str, cutoff: Cutoff) -> int:
        """Get cumulative progress as it stood at a cutoff.

        Args:
            deadline_id: Deadline to look up
            cutoff: Inclusive moment; a plain date means the end of that day

        Returns:
            Progress of the latest entry at or before the cutoff, 0 if none
        """
        latest: Optional[ProgressEntryRecord] = None
        for entry in self.entries(deadline_id):
            if not _qualifies(entry, cutoff):
                break
            latest = entry
        return latest.current_progress if latest else 0

    def latest_progress(self, deadline_id: str) -> int:
        """Get the most recent progress regardless of time."""
        entries = self.entries(deadline_id)
        return entries[-1].current_progress if entries else 0

    def progress_at_start_of_day(self, deadline_id: str, day: date) -> int:
        """Get progress as it stood when ``day`` began (end of the day before)."""
        return self.progress_as_of(deadline_id, day - timedelta(days=1))

    def progress_for_day(self, deadline_id: str, day: date) -> int:
        """Get how much progress was made during ``day``."""
        return max(
            0,
            self.progress_as_of(deadline_id, day)
            - self.progress_at_start_of_day(deadline_id, day),
        )

    def activity_days(
        self, deadline_id: str, window_start: date, window_end: date
    ) -> set[date]:
        """Get days in a window with at least one non-baseline entry.

        Args:
            deadline_id: Deadline to look up
            window_start: First day of the window (inclusive)
            window_end: Last day of the window (inclusive)

        Returns:
            Set of calendar days with reading activity
        """
        return {
            entry.created_at.date()
            for entry in self.entries(deadline_id)
            if not entry.ignore_in_calcs
            and window_start <= entry.created_at.date() <= window_end
        }

    def daily_units(
        self,
        deadline_id: str,
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
    ) -> dict[date, int]:
        """Get units credited to each day.

        Each non-baseline entry is credited with how far it moved progress
        past the entry before it. The previous entry may be a baseline.

        Args:
            deadline_id: Deadline to look up
            window_start: Ignore days before this (inclusive bound)
            window_end: Ignore days after this (inclusive bound)

        Returns:
            Mapping of day to units; days with activity but no gain map to 0
        """
        credited: dict[date, int] = {}
        previous = 0

        for entry in self.entries(deadline_id):
            gain = max(0, entry.current_progress - previous)
            previous = entry.current_progress

            if entry.ignore_in_calcs:
                continue

            day = entry.created_at.date()
            if window_start is not None and day < window_start:
                continue
            if window_end is not None and day > window_end:
                continue

            credited[day] = credited.get(day, 0) + gain

        return credited
