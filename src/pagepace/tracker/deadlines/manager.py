"""Deadline manager: loads deadlines and progress, runs the pace engine."""

import logging
from datetime import date, datetime, time
from typing import Iterable, Optional

from ..config import Config, get_config
from ..db.schemas import (
    DeadlineCreate,
    DeadlineFormat,
    DeadlineRecord,
    DeadlineStatus,
    ProgressEntryCreate,
    ProgressEntryRecord,
    StatusChangeRecord,
    UnitKind,
)
from ..db.sqlite import Database, get_db
from ..errors import ValidationError
from ..pace.estimator import PaceEstimator
from ..pace.required import days_left, required_pace_history
from ..pace.schemas import PaceProfile, RequiredPacePoint, UrgencySnapshot
from ..pace.urgency import UrgencyClassifier
from ..progress.corrector import BackwardProgressCorrector
from ..progress.ledger import Cutoff, ProgressLedger
from ..progress.remaining import RemainingWorkCalculator
from ..progress.schemas import CorrectionResult, RemainingWork
from ..targets.daily import (
    DailyTargetAggregator,
    combined,
    overdue_catch_up,
    progress_made_today,
)
from ..targets.schemas import DailyTargetSnapshot, OverdueCatchUp
from .schemas import DeadlineGroups, DeadlineSummary

logger = logging.getLogger(__name__)


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _format_for(unit: UnitKind) -> DeadlineFormat:
    return next(fmt for fmt in DeadlineFormat if fmt.unit == unit)


class DeadlineManager:
    """Manages deadlines and their progress for one user."""

    def __init__(self, db: Optional[Database] = None, config: Optional[Config] = None):
        """Initialize deadline manager.

        Args:
            db: Database instance
            config: Configuration; supplies the user and the pace policy
        """
        self.db = db or get_db()
        self.config = config or get_config()
        self.targets = DailyTargetAggregator()
        self.classifier = UrgencyClassifier(
            impossible_factor=self.config.impossible_factor,
            urgent_days=self.config.urgent_days,
        )

    @property
    def user_id(self) -> str:
        return self.config.user_id

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def get_deadline(self, deadline_id: str) -> DeadlineRecord:
        """Get a deadline, raising ValidationError if it does not exist."""
        deadline = self.db.load_deadline(deadline_id)
        if deadline is None:
            raise ValidationError(f"Deadline not found: {deadline_id}")
        return deadline

    def find_deadline(self, id_or_title: str) -> DeadlineRecord:
        """Find a deadline by ID, ID prefix or case-insensitive title."""
        deadline = self.db.load_deadline(id_or_title)
        if deadline is not None:
            return deadline

        needle = id_or_title.strip().lower()
        matches = [
            d
            for d in self.list_deadlines()
            if d.id.startswith(id_or_title) or d.title.lower() == needle
        ]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise ValidationError(f"Deadline not found: {id_or_title}")
        raise ValidationError(
            f"'{id_or_title}' matches {len(matches)} deadlines, use the ID instead"
        )

    def list_deadlines(self) -> list[DeadlineRecord]:
        """Get all deadlines of the configured user."""
        return self.db.load_deadlines(self.user_id)

    def _ledger_for(self, deadlines: Iterable[DeadlineRecord]) -> ProgressLedger:
        return ProgressLedger(self.db.load_progress_entries_for(d.id for d in deadlines))

    def _estimator(self, ledger: ProgressLedger) -> PaceEstimator:
        return PaceEstimator(
            ledger,
            window_days=self.config.pace_window_days,
            reliable_min_days=self.config.reliable_min_days,
            week_start=self.config.week_start,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_deadline(
        self,
        data: DeadlineCreate,
        created_at: datetime,
        starting_progress: int = 0,
    ) -> DeadlineRecord:
        """Create a deadline, recording any starting progress as a baseline.

        Args:
            data: Deadline creation data
            created_at: Creation timestamp
            starting_progress: Progress made before tracking began

        Returns:
            Created deadline
        """
        if starting_progress < 0:
            raise ValidationError(f"Starting progress cannot be negative: {starting_progress}")
        if starting_progress > data.total_quantity:
            raise ValidationError(
                f"Starting progress {starting_progress} exceeds total {data.total_quantity}"
            )

        deadline = self.db.create_deadline(data, created_at)
        if starting_progress > 0:
            self.db.add_progress_entry(
                ProgressEntryCreate(
                    deadline_id=deadline.id,
                    current_progress=starting_progress,
                    created_at=created_at,
                    ignore_in_calcs=True,
                )
            )
        return deadline

    def log_progress(
        self,
        deadline_id: str,
        value: int,
        now: datetime,
        time_spent_reading: Optional[int] = None,
    ) -> ProgressEntryRecord:
        """Log new cumulative progress. Only forward moves are accepted.

        Args:
            deadline_id: Deadline ID
            value: New cumulative progress in base units
            now: Timestamp of the entry
            time_spent_reading: Optional minutes spent in this session

        Returns:
            Created progress entry

        Raises:
            ValidationError: If the value is negative, below current progress,
                or stamped before the newest entry
        """
        self.get_deadline(deadline_id)
        if value < 0:
            raise ValidationError(f"Progress cannot be negative: {value}")

        ledger = ProgressLedger(self.db.load_progress_entries(deadline_id))
        entries = ledger.entries(deadline_id)
        current = ledger.latest_progress(deadline_id)
        if entries:
            newest = entries[-1].created_at
            # equal stamps sort by id, so only a repeat of the same value is safe
            if now < newest or (now == newest and value != current):
                raise ValidationError(
                    f"Progress must be logged after the newest entry ({newest.isoformat()})"
                )
        if value < current:
            raise ValidationError(
                f"Progress {value} is below current progress {current}; "
                "use a correction to move backward"
            )

        return self.db.add_progress_entry(
            ProgressEntryCreate(
                deadline_id=deadline_id,
                current_progress=value,
                created_at=now,
                time_spent_reading=time_spent_reading,
            )
        )

    def correct_progress(self, deadline_id: str, value: int, now: datetime) -> CorrectionResult:
        """Move a deadline's progress backward."""
        self.get_deadline(deadline_id)
        return BackwardProgressCorrector(self.db).apply(deadline_id, value, now)

    def set_status(
        self, deadline_id: str, status: DeadlineStatus, now: datetime
    ) -> StatusChangeRecord:
        """Record a status change."""
        deadline = self.get_deadline(deadline_id)
        if deadline.latest_status(now) == status:
            raise ValidationError(f"Deadline is already {status.value}")
        return self.db.add_status(deadline_id, status, now)

    # -------------------------------------------------------------------------
    # Calculations
    # -------------------------------------------------------------------------

    def remaining_work(self, deadline_id: str, as_of: Cutoff) -> RemainingWork:
        """Get remaining work for a deadline."""
        deadline = self.get_deadline(deadline_id)
        ledger = self._ledger_for([deadline])
        return RemainingWorkCalculator(ledger).compute(deadline, as_of)

    def pace_profile(self, format: DeadlineFormat, today: date) -> PaceProfile:
        """Get the user's historical pace in ``format``'s unit."""
        deadlines = self.list_deadlines()
        ledger = self._ledger_for(deadlines)
        return self._estimator(ledger).estimate_for_user(deadlines, format, today)

    def urgency(self, deadline_id: str, today: date) -> UrgencySnapshot:
        """Classify one deadline as of ``today``."""
        return self.summarize(deadline_id, today).urgency

    def summarize(self, deadline_id: str, today: date) -> DeadlineSummary:
        """Get progress, remaining work, urgency and a status message."""
        deadline = self.get_deadline(deadline_id)
        deadlines = self.list_deadlines()
        ledger = self._ledger_for(deadlines)
        return self._summarize(deadline, deadlines, ledger, today)

    def summarize_all(self, today: date) -> list[DeadlineSummary]:
        """Summarize every non-archived deadline, soonest due first."""
        deadlines = self.list_deadlines()
        ledger = self._ledger_for(deadlines)
        return [
            self._summarize(d, deadlines, ledger, today)
            for d in deadlines
            if not d.is_archived()
        ]

    def _summarize(
        self,
        deadline: DeadlineRecord,
        deadlines: list[DeadlineRecord],
        ledger: ProgressLedger,
        today: date,
    ) -> DeadlineSummary:
        work = RemainingWorkCalculator(ledger).compute(deadline, today)
        pace = self._estimator(ledger).estimate_for_user(deadlines, deadline.format, today)
        snapshot = self.classifier.classify(deadline, work, pace, today)
        logger.debug("Deadline %s is %s", deadline.id, snapshot.level.value)
        return DeadlineSummary(
            deadline=deadline,
            progress=ledger.progress_as_of(deadline.id, today),
            work=work,
            urgency=snapshot,
            message=self.classifier.describe(snapshot, pace, deadline.format),
        )

    def required_pace_history(self, deadline_id: str, today: date) -> list[RequiredPacePoint]:
        """Get the units per day a deadline needed on each logged day."""
        deadline = self.get_deadline(deadline_id)
        return required_pace_history(deadline, self._ledger_for([deadline]), today)

    def separate(self, today: date) -> DeadlineGroups:
        """Split deadlines by where they stand.

        Reading deadlines are active or overdue by due date. Paused ones are
        set aside; completed and did-not-finish stay separate. Every other
        status is pending.
        """
        groups = DeadlineGroups()
        by_status = {
            DeadlineStatus.PAUSED: groups.set_aside,
            DeadlineStatus.COMPLETE: groups.completed,
            DeadlineStatus.DID_NOT_FINISH: groups.did_not_finish,
        }
        for deadline in self.list_deadlines():
            status = deadline.latest_status()
            if status in by_status:
                by_status[status].append(deadline)
            elif not deadline.is_active():
                groups.pending.append(deadline)
            elif days_left(deadline.deadline_date, today) < 0:
                groups.overdue.append(deadline)
            else:
                groups.active.append(deadline)

        for group in (groups.active, groups.overdue, groups.pending, *by_status.values()):
            group.sort(key=lambda d: (d.deadline_date, d.created_at))
        return groups

    # -------------------------------------------------------------------------
    # Daily targets
    # -------------------------------------------------------------------------

    def _goal_deadlines(
        self, deadlines: list[DeadlineRecord], now: datetime
    ) -> tuple[list[DeadlineRecord], list[DeadlineRecord]]:
        """Pick the deadlines behind today's goal and today's progress.

        The goal uses each deadline's status as the day began, or its first
        status if it was created today. Progress also counts deadlines that
        became active since. Overdue deadlines are left to catch-up.
        """
        today = now.date()
        start = _start_of_day(today)
        not_overdue = [d for d in deadlines if d.deadline_date >= today]

        for_goal = [d for d in not_overdue if d.is_active(max(start, d.created_at))]
        for_progress = [
            d for d in not_overdue if d.is_active(max(start, d.created_at)) or d.is_active(now)
        ]
        return for_goal, for_progress

    def todays_targets(self, now: datetime) -> dict[DeadlineFormat, DailyTargetSnapshot]:
        """Get today's goal and progress per format.

        The goal comes from deadlines that were active when the day began, so
        completing one later in the day keeps the goal where it was.
        """
        deadlines = self.list_deadlines()
        ledger = self._ledger_for(deadlines)
        for_goal, for_progress = self._goal_deadlines(deadlines, now)
        return self.targets.snapshot_for_today(for_goal, for_progress, ledger, now)

    def todays_target_for(self, unit: UnitKind, now: datetime) -> DailyTargetSnapshot:
        """Get today's goal and progress for a unit, formats combined."""
        return combined(self.todays_targets(now), unit)

    def overdue_catch_up(self, unit: UnitKind, now: datetime) -> OverdueCatchUp:
        """Get the capacity left for overdue books in a unit today."""
        deadlines = self.list_deadlines()
        ledger = self._ledger_for(deadlines)
        today = now.date()

        overdue = [
            d
            for d in deadlines
            if d.format.unit == unit and d.is_active(now) and d.deadline_date < today
        ]
        pace = self._estimator(ledger).estimate_for_user(deadlines, _format_for(unit), today)

        for_goal, for_progress = self._goal_deadlines(deadlines, now)
        target = combined(
            self.targets.snapshot_for_today(for_goal, for_progress, ledger, now), unit
        )

        return overdue_catch_up(
            overdue,
            user_pace=pace.average_per_day,
            todays_goal=target.total_required,
            todays_progress=target.current_achieved,
            progress_today=lambda d: progress_made_today(ledger, d.id, now),
        )
