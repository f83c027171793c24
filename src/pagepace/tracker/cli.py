"""Command-line interface for pagepace.

Built with Typer for commands and Rich for output.
"""

import logging
from datetime import date, datetime
from typing import Optional

import pydantic
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import get_config
from .db import get_db
from .db.schemas import DeadlineCreate, DeadlineFormat, DeadlineStatus, Flexibility, UnitKind
from .deadlines import DeadlineManager
from .errors import PersistenceError, ValidationError
from .pace.schemas import UrgencyLevel
from .targets.daily import combined
from .units.converter import format_pace, format_quantity, parse_audio_time, unit_label

# Create the main app
app = typer.Typer(
    name="pagepace",
    help="Track reading deadlines and keep pace with them.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

URGENCY_STYLES = {
    UrgencyLevel.GOOD: "green",
    UrgencyLevel.APPROACHING: "yellow",
    UrgencyLevel.URGENT: "red",
    UrgencyLevel.IMPOSSIBLE: "bold red",
    UrgencyLevel.OVERDUE: "bold red",
}


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def setup_logging(level: str) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def get_manager() -> DeadlineManager:
    """Build a manager for the configured database and user."""
    config = get_config()
    problems = config.validate()
    if problems:
        for problem in problems:
            print_error(problem)
        raise typer.Exit(1)
    return DeadlineManager(db=get_db(str(config.db_path)), config=config)


def parse_quantity(format: DeadlineFormat, text: str) -> int:
    """Parse a user-entered quantity into base units."""
    if format.is_audio:
        minutes = parse_audio_time(text)
        if minutes is None:
            print_error(f"Could not understand audio time: {text} (try 1:30, 2h 15m or 90)")
            raise typer.Exit(1)
        return minutes

    try:
        pages = int(text)
    except ValueError:
        print_error(f"Pages must be a whole number: {text}")
        raise typer.Exit(1)
    if pages < 0:
        print_error(f"Pages cannot be negative: {pages}")
        raise typer.Exit(1)
    return pages


def find_or_exit(manager: DeadlineManager, query: str):
    """Look up a deadline by ID, ID prefix or title."""
    try:
        return manager.find_deadline(query)
    except ValidationError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Track reading deadlines and keep pace with them."""
    setup_logging("DEBUG" if verbose else get_config().log_level)


# ============================================================================
# Deadline Commands
# ============================================================================


@app.command()
def add(
    title: str = typer.Argument(..., help="Book title"),
    total: str = typer.Option(..., "--total", "-t", help="Pages, or audio length like 10h 30m"),
    due: str = typer.Option(..., "--due", "-d", help="Due date (YYYY-MM-DD)"),
    format: DeadlineFormat = typer.Option(DeadlineFormat.PAGES, "--format", "-f", help="Book format"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author"),
    strict: bool = typer.Option(False, "--strict", help="The due date cannot move"),
    start: Optional[str] = typer.Option(None, "--start", "-s", help="Progress already made"),
    status: DeadlineStatus = typer.Option(DeadlineStatus.READING, "--status", help="Initial status"),
) -> None:
    """Add a new reading deadline."""
    manager = get_manager()

    try:
        due_date = date.fromisoformat(due)
    except ValueError:
        print_error(f"Invalid date: {due} (expected YYYY-MM-DD)")
        raise typer.Exit(1)

    starting = parse_quantity(format, start) if start else 0

    try:
        data = DeadlineCreate(
            title=title,
            author=author,
            format=format,
            total_quantity=parse_quantity(format, total),
            deadline_date=due_date,
            flexibility=Flexibility.STRICT if strict else Flexibility.FLEXIBLE,
            user_id=manager.user_id,
            status=status,
        )
        deadline = manager.create_deadline(data, datetime.now(), starting_progress=starting)
    except pydantic.ValidationError as e:
        print_error(f"Invalid deadline: {e.errors()[0]['msg']}")
        raise typer.Exit(1)
    except (ValidationError, PersistenceError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Added: {deadline.title} due {deadline.deadline_date}")
    print_info(f"ID: {deadline.id}")


@app.command()
def log(
    query: str = typer.Argument(..., help="Deadline ID or title"),
    value: str = typer.Argument(..., help="Current page, or audio position like 3h 20m"),
    minutes: Optional[int] = typer.Option(None, "--minutes", "-m", help="Minutes spent this session"),
) -> None:
    """Log where you are now in a book."""
    manager = get_manager()
    deadline = find_or_exit(manager, query)
    progress = parse_quantity(deadline.format, value)

    try:
        manager.log_progress(deadline.id, progress, datetime.now(), time_spent_reading=minutes)
    except (ValidationError, PersistenceError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    shown = format_quantity(deadline.format, progress)
    total = format_quantity(deadline.format, deadline.total_quantity)
    print_success(f"{deadline.title}: {shown} / {total}")


@app.command()
def correct(
    query: str = typer.Argument(..., help="Deadline ID or title"),
    value: str = typer.Argument(..., help="Corrected (lower) progress"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Move progress backward, removing entries above the new value."""
    manager = get_manager()
    deadline = find_or_exit(manager, query)
    progress = parse_quantity(deadline.format, value)

    if not yes:
        shown = format_quantity(deadline.format, progress)
        if not typer.confirm(f"Reset {deadline.title} to {shown}? Later entries are removed."):
            console.print("[dim]Cancelled.[/dim]")
            raise typer.Exit(0)

    try:
        result = manager.correct_progress(deadline.id, progress, datetime.now())
    except (ValidationError, PersistenceError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(
        f"{deadline.title} corrected to {format_quantity(deadline.format, progress)}, "
        f"{len(result.deleted_entry_ids)} entries removed"
    )


@app.command("set-status")
def set_status(
    query: str = typer.Argument(..., help="Deadline ID or title"),
    status: DeadlineStatus = typer.Argument(..., help="New status"),
) -> None:
    """Change a deadline's status (complete, paused, did_not_finish, ...)."""
    manager = get_manager()
    deadline = find_or_exit(manager, query)

    try:
        manager.set_status(deadline.id, status, datetime.now())
    except (ValidationError, PersistenceError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"{deadline.title} is now {status.value}")


# ============================================================================
# Reporting Commands
# ============================================================================


@app.command()
def status(
    query: Optional[str] = typer.Argument(None, help="Deadline ID or title (default: all)"),
) -> None:
    """Show progress and urgency for your deadlines."""
    manager = get_manager()
    today = date.today()

    if query:
        deadline = find_or_exit(manager, query)
        summary = manager.summarize(deadline.id, today)
        fmt = deadline.format
        style = URGENCY_STYLES[summary.urgency.level]
        lines = [
            f"[bold]{deadline.title}[/bold]" + (f" by {deadline.author}" if deadline.author else ""),
            f"Format: {fmt.value}",
            f"Due: {deadline.deadline_date} ({summary.urgency.days_left} days left)",
            f"Progress: {format_quantity(fmt, summary.progress)} / "
            f"{format_quantity(fmt, deadline.total_quantity)} ({summary.work.percentage}%)",
            f"Remaining: {format_quantity(fmt, summary.work.remaining)}",
            f"Required: {format_pace(fmt, summary.urgency.required_pace_today)}",
            f"Status: [{style}]{summary.urgency.level.value}[/{style}] - {summary.message}",
        ]
        console.print(Panel("\n".join(lines), title="Deadline"))
        return

    groups = manager.separate(today)
    counts = {
        "completed": len(groups.completed),
        "did not finish": len(groups.did_not_finish),
    }
    summaries = manager.summarize_all(today)
    if not summaries and not any(counts.values()):
        console.print("[dim]No deadlines yet. Add one with 'pagepace add'.[/dim]")
        return
    if not summaries:
        print_info("Nothing in progress.")

    table = Table(title="Deadlines", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Due")
    table.add_column("Left", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for s in summaries:
        fmt = s.deadline.format
        style = URGENCY_STYLES[s.urgency.level]
        table.add_row(
            s.deadline.title,
            str(s.deadline.deadline_date),
            str(s.urgency.days_left),
            f"{s.work.percentage}%",
            format_quantity(fmt, s.work.remaining),
            f"[{style}]{s.message}[/{style}]",
            s.deadline.id[:8],
        )

    if summaries:
        console.print(table)
    others = ", ".join(f"{count} {label}" for label, count in counts.items() if count)
    if others:
        print_info(f"Also: {others}")


@app.command()
def today() -> None:
    """Show today's reading and listening targets."""
    manager = get_manager()
    now = datetime.now()
    snapshots = manager.todays_targets(now)

    table = Table(title=f"Today ({now.date()})", show_header=True, header_style="bold magenta")
    table.add_column("Unit", style="cyan")
    table.add_column("Goal", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Left", justify="right")
    table.add_column("Overdue catch-up", justify="right")

    for unit in UnitKind:
        target = combined(snapshots, unit)
        fmt = next(f for f in DeadlineFormat if f.unit == unit)
        catch_up = manager.overdue_catch_up(unit, now)
        catch_up_text = (
            f"{format_quantity(fmt, catch_up.current)} / {format_quantity(fmt, catch_up.total)}"
            if catch_up.has_capacity or catch_up.current
            else "-"
        )
        done = format_quantity(fmt, target.current_achieved)
        table.add_row(
            unit_label(fmt),
            format_quantity(fmt, target.total_required),
            f"[green]{done}[/green]" if target.is_met else done,
            format_quantity(fmt, target.remaining_today),
            catch_up_text,
        )

    console.print(table)


@app.command()
def pace(
    format: DeadlineFormat = typer.Option(DeadlineFormat.PAGES, "--format", "-f", help="Unit to measure"),
) -> None:
    """Show your historical pace."""
    manager = get_manager()
    profile = manager.pace_profile(format, date.today())

    if not profile.has_data:
        print_info(f"No {unit_label(format)} logged before this week yet.")
        return

    lines = [
        f"Average: {format_pace(format, profile.average_per_day)}",
        f"Best day: {format_quantity(format, profile.best_day_units)}",
        f"Active days: {profile.active_day_count}",
        f"Window: {profile.window_start} to {profile.window_end}",
    ]
    if not profile.is_reliable:
        lines.append("[yellow]Not enough active days for a reliable pace[/yellow]")
    console.print(Panel("\n".join(lines), title=f"Pace ({unit_label(format)})"))


@app.command()
def history(
    query: str = typer.Argument(..., help="Deadline ID or title"),
) -> None:
    """Show the pace a deadline required on each day you logged."""
    manager = get_manager()
    deadline = find_or_exit(manager, query)
    points = manager.required_pace_history(deadline.id, date.today())

    if not points:
        print_info("No progress logged yet.")
        return

    table = Table(title=f"Required pace: {deadline.title}", show_header=True, header_style="bold magenta")
    table.add_column("Day")
    table.add_column("Required", justify="right")
    for point in points:
        table.add_row(str(point.day), format_pace(deadline.format, point.units))
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__

    console.print(f"pagepace version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
