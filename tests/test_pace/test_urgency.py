"""Tests for urgency classification."""

from datetime import date, timedelta

import pytest

from pagepace.tracker.db.schemas import DeadlineFormat, Flexibility
from pagepace.tracker.pace.schemas import PaceProfile, UrgencyLevel, UrgencySnapshot
from pagepace.tracker.pace.urgency import UrgencyClassifier
from pagepace.tracker.progress.remaining import remaining_work

FLEXIBLE = Flexibility.FLEXIBLE
STRICT = Flexibility.STRICT

RELIABLE = PaceProfile(
    average_per_day=30, active_day_count=5, is_reliable=True, total_units=150, best_day_units=40
)
UNRELIABLE = PaceProfile(
    average_per_day=30, active_day_count=2, is_reliable=False, total_units=60, best_day_units=40
)


@pytest.fixture
def classifier() -> UrgencyClassifier:
    return UrgencyClassifier()


class TestClassifyLevel:
    """Tests for the rule order."""

    def test_overdue(self, classifier: UrgencyClassifier):
        """Test a passed due date with work left is overdue."""
        level = classifier.classify_level(-2, 50, 50, RELIABLE, FLEXIBLE)
        assert level == UrgencyLevel.OVERDUE

    def test_overdue_even_when_finished(self, classifier: UrgencyClassifier):
        """Test overdue is checked before remaining work."""
        assert classifier.classify_level(-1, 0, 0, RELIABLE, FLEXIBLE) == UrgencyLevel.OVERDUE

    def test_finished_is_good(self, classifier: UrgencyClassifier):
        """Test nothing left to read is good, even on the due date."""
        assert classifier.classify_level(0, 0, 0, RELIABLE, STRICT) == UrgencyLevel.GOOD

    def test_impossible_strict(self, classifier: UrgencyClassifier):
        """Test a strict deadline beyond 2.5x the best day is impossible."""
        assert classifier.classify_level(2, 202, 101, RELIABLE, STRICT) == UrgencyLevel.IMPOSSIBLE

    def test_impossible_threshold_is_exclusive(self, classifier: UrgencyClassifier):
        """Test exactly 2.5x the best day is not impossible."""
        assert classifier.classify_level(2, 200, 100, RELIABLE, STRICT) == UrgencyLevel.URGENT

    def test_flexible_never_impossible(self, classifier: UrgencyClassifier):
        """Test flexible deadlines are at worst urgent."""
        assert classifier.classify_level(2, 400, 200, RELIABLE, FLEXIBLE) == UrgencyLevel.URGENT

    def test_unreliable_never_impossible(self, classifier: UrgencyClassifier):
        """Test too little history defaults to good."""
        assert classifier.classify_level(5, 2000, 400, UNRELIABLE, STRICT) == UrgencyLevel.GOOD

    def test_due_today(self, classifier: UrgencyClassifier):
        """Test work left on the due date is urgent."""
        assert classifier.classify_level(0, 10, 10, UNRELIABLE, FLEXIBLE) == UrgencyLevel.URGENT

    def test_behind_far_out_is_approaching(self, classifier: UrgencyClassifier):
        """Test falling behind with time to spare."""
        assert classifier.classify_level(10, 350, 35, RELIABLE, FLEXIBLE) == UrgencyLevel.APPROACHING

    def test_behind_close_is_urgent(self, classifier: UrgencyClassifier):
        """Test falling behind with three days left."""
        assert classifier.classify_level(3, 105, 35, RELIABLE, FLEXIBLE) == UrgencyLevel.URGENT

    def test_on_pace_is_good(self, classifier: UrgencyClassifier):
        """Test keeping up is good."""
        assert classifier.classify_level(10, 300, 30, RELIABLE, FLEXIBLE) == UrgencyLevel.GOOD

    def test_configurable_thresholds(self):
        """Test the impossible factor and urgent window come from the constructor."""
        strict = UrgencyClassifier(impossible_factor=1.5, urgent_days=5)
        assert strict.classify_level(2, 122, 61, RELIABLE, STRICT) == UrgencyLevel.IMPOSSIBLE
        assert strict.classify_level(5, 175, 35, RELIABLE, FLEXIBLE) == UrgencyLevel.URGENT

    @pytest.mark.parametrize("pace", [RELIABLE, UNRELIABLE, PaceProfile()])
    @pytest.mark.parametrize("flexibility", [FLEXIBLE, STRICT])
    @pytest.mark.parametrize("remaining", [0, 20, 100, 400, 2000])
    def test_fewer_days_never_calmer(
        self, classifier: UrgencyClassifier, pace, flexibility, remaining
    ):
        """Test severity never drops as the due date gets closer."""
        previous = None
        for days in range(30, -4, -1):
            required = remaining / max(1, days)
            level = classifier.classify_level(days, remaining, required, pace, flexibility)
            if previous is not None:
                assert level.severity >= previous.severity, (days, level, previous)
            previous = level


class TestClassify:
    """Tests for classifying deadline records."""

    def test_overdue_deadline(self, classifier: UrgencyClassifier, make_deadline):
        """Test a deadline two days past due."""
        today = date(2025, 3, 12)
        deadline = make_deadline(total=300, due=today - timedelta(days=2))

        snapshot = classifier.classify(deadline, remaining_work(300, 200), RELIABLE, today)

        assert snapshot.level == UrgencyLevel.OVERDUE
        assert snapshot.days_left == -2
        assert snapshot.remaining == 100
        assert snapshot.required_pace_today == 100

    def test_required_pace(self, classifier: UrgencyClassifier, make_deadline):
        """Test required pace is remaining over days left."""
        today = date(2025, 3, 12)
        deadline = make_deadline(total=300, due=today + timedelta(days=4))

        snapshot = classifier.classify(deadline, remaining_work(300, 200), RELIABLE, today)

        assert snapshot.days_left == 4
        assert snapshot.required_pace_today == pytest.approx(25)
        assert snapshot.level == UrgencyLevel.GOOD


class TestDescribe:
    """Tests for status messages."""

    PAGES = DeadlineFormat.PAGES

    def snapshot(self, level: UrgencyLevel, required: float = 30, remaining: int = 90):
        return UrgencySnapshot(
            level=level, days_left=3, required_pace_today=required, remaining=remaining
        )

    def test_overdue(self, classifier: UrgencyClassifier):
        """Test the overdue message."""
        message = classifier.describe(self.snapshot(UrgencyLevel.OVERDUE), RELIABLE, self.PAGES)
        assert message == "Return or renew"

    def test_good_with_history(self, classifier: UrgencyClassifier):
        """Test the on-track message shows the reader's pace."""
        message = classifier.describe(self.snapshot(UrgencyLevel.GOOD), RELIABLE, self.PAGES)
        assert message == "On track at 30 pages/day"

    def test_good_without_history(self, classifier: UrgencyClassifier):
        """Test the on-track message without enough history."""
        message = classifier.describe(self.snapshot(UrgencyLevel.GOOD), UNRELIABLE, self.PAGES)
        assert message == "On track (default pace)"

    def test_approaching(self, classifier: UrgencyClassifier):
        """Test the approaching message shows the gap."""
        message = classifier.describe(
            self.snapshot(UrgencyLevel.APPROACHING, required=40), RELIABLE, self.PAGES
        )
        assert message == "Read ~10 pages/day more"

    def test_urgent(self, classifier: UrgencyClassifier):
        """Test the urgent message."""
        message = classifier.describe(self.snapshot(UrgencyLevel.URGENT), RELIABLE, self.PAGES)
        assert message == "Tough timeline"

    def test_impossible_audio(self, classifier: UrgencyClassifier):
        """Test the impossible message compares both paces."""
        pace = PaceProfile(
            average_per_day=45, active_day_count=4, is_reliable=True, best_day_units=60
        )
        message = classifier.describe(
            self.snapshot(UrgencyLevel.IMPOSSIBLE, required=200),
            pace,
            DeadlineFormat.AUDIO_MINUTES,
        )
        assert message == "Current: 45m vs Required: 3h 20m"

    def test_finished(self, classifier: UrgencyClassifier):
        """Test a finished deadline."""
        message = classifier.describe(
            self.snapshot(UrgencyLevel.GOOD, required=0, remaining=0), RELIABLE, self.PAGES
        )
        assert message == "Finished"
