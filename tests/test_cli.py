"""Tests for the CLI interface."""

import os
from datetime import date, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pagepace.tracker.cli import app
from pagepace.tracker.config import reset_config
from pagepace.tracker.db.sqlite import get_db, reset_db


@pytest.fixture(autouse=True)
def setup_test_db(tmp_path: Path):
    """Set up a test database for each test."""
    reset_db()
    reset_config()
    os.environ["PAGEPACE_DB_PATH"] = str(tmp_path / "pagepace.db")

    yield

    reset_db()
    reset_config()
    del os.environ["PAGEPACE_DB_PATH"]


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


def due_in(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def add_book(runner: CliRunner, title: str = "Piranesi", *extra: str):
    return runner.invoke(app, ["add", title, "--total", "300", "--due", due_in(10), *extra])


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        """Test that help command works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "reading deadlines" in result.stdout

    def test_version(self, runner: CliRunner):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout


class TestAddCommand:
    """Tests for add command."""

    def test_add_pages(self, runner: CliRunner):
        """Test adding a page deadline."""
        result = add_book(runner)
        assert result.exit_code == 0
        assert "Added:" in result.stdout
        assert "Piranesi" in result.stdout

    def test_add_audio_with_start(self, runner: CliRunner):
        """Test adding an audiobook with a parsed length and starting point."""
        result = runner.invoke(
            app,
            [
                "add", "Dune",
                "--total", "21h 2m",
                "--due", due_in(14),
                "--format", "audio-minutes",
                "--start", "1:30",
            ],
        )
        assert result.exit_code == 0

        deadline = get_db().load_deadlines("local")[0]
        assert deadline.total_quantity == 21 * 60 + 2
        entries = get_db().load_progress_entries(deadline.id)
        assert entries[0].current_progress == 90
        assert entries[0].ignore_in_calcs

    def test_add_bad_date(self, runner: CliRunner):
        """Test an invalid due date exits with an error."""
        result = runner.invoke(app, ["add", "X", "--total", "10", "--due", "soon"])
        assert result.exit_code == 1
        assert "Invalid date" in result.stdout

    def test_add_zero_total(self, runner: CliRunner):
        """Test a zero total is rejected."""
        result = runner.invoke(app, ["add", "X", "--total", "0", "--due", due_in(3)])
        assert result.exit_code == 1
        assert "Invalid deadline" in result.stdout


class TestProgressCommands:
    """Tests for log and correct commands."""

    def test_log(self, runner: CliRunner):
        """Test logging progress."""
        add_book(runner)
        result = runner.invoke(app, ["log", "Piranesi", "120"])
        assert result.exit_code == 0
        assert "120 / 300" in result.stdout

    def test_log_backward_fails(self, runner: CliRunner):
        """Test logging lower progress points to a correction."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "120"])
        result = runner.invoke(app, ["log", "Piranesi", "100"])
        assert result.exit_code == 1
        assert "Error:" in result.stdout

    def test_log_unknown_book(self, runner: CliRunner):
        """Test logging against an unknown deadline."""
        result = runner.invoke(app, ["log", "Nothing", "10"])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_correct(self, runner: CliRunner):
        """Test correcting progress backward."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "120"])
        runner.invoke(app, ["log", "Piranesi", "200"])

        result = runner.invoke(app, ["correct", "Piranesi", "150", "--yes"])

        assert result.exit_code == 0
        assert "corrected" in result.stdout
        deadline = get_db().load_deadlines("local")[0]
        values = [e.current_progress for e in get_db().load_progress_entries(deadline.id)]
        assert max(values) == 150

    def test_correct_cancelled(self, runner: CliRunner):
        """Test declining the confirmation changes nothing."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "120"])

        result = runner.invoke(app, ["correct", "Piranesi", "50"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.stdout

    def test_correct_upward_fails(self, runner: CliRunner):
        """Test a correction must go down."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "120"])
        result = runner.invoke(app, ["correct", "Piranesi", "150", "--yes"])
        assert result.exit_code == 1


class TestReportingCommands:
    """Tests for status, today, pace and history."""

    def test_status_empty(self, runner: CliRunner):
        """Test status with no deadlines."""
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "No deadlines yet" in result.stdout

    def test_status_all(self, runner: CliRunner):
        """Test the status table."""
        add_book(runner)
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Piranesi" in result.stdout

    def test_status_counts_finished(self, runner: CliRunner):
        """Test finished deadlines are counted below the table."""
        add_book(runner)
        add_book(runner, "Circe")
        runner.invoke(app, ["set-status", "Circe", "complete"])

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Piranesi" in result.stdout
        assert "1 completed" in result.stdout

    def test_status_only_finished(self, runner: CliRunner):
        """Test a user with only finished deadlines is not told to add one."""
        add_book(runner)
        runner.invoke(app, ["set-status", "Piranesi", "did_not_finish"])

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Nothing in progress" in result.stdout
        assert "1 did not finish" in result.stdout

    def test_status_one(self, runner: CliRunner):
        """Test the detail panel for one deadline."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "150"])
        result = runner.invoke(app, ["status", "Piranesi"])
        assert result.exit_code == 0
        assert "50%" in result.stdout
        assert "15 pages/day" in result.stdout

    def test_today(self, runner: CliRunner):
        """Test today's targets."""
        add_book(runner)
        result = runner.invoke(app, ["today"])
        assert result.exit_code == 0
        assert "pages" in result.stdout
        assert "30" in result.stdout

    def test_pace_without_history(self, runner: CliRunner):
        """Test pace before anything was logged."""
        result = runner.invoke(app, ["pace"])
        assert result.exit_code == 0
        assert "No pages logged" in result.stdout

    def test_history(self, runner: CliRunner):
        """Test the required pace history."""
        add_book(runner)
        runner.invoke(app, ["log", "Piranesi", "100"])
        result = runner.invoke(app, ["history", "Piranesi"])
        assert result.exit_code == 0
        assert "20 pages/day" in result.stdout

    def test_set_status(self, runner: CliRunner):
        """Test changing a status."""
        add_book(runner)
        result = runner.invoke(app, ["set-status", "Piranesi", "complete"])
        assert result.exit_code == 0
        assert "complete" in result.stdout
