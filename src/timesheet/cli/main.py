"""Main CLI application."""

import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from timesheet import __version__
from timesheet.analysis.aggregation import (
    ALL_PROJECTS,
    day_total_seconds,
    format_clock,
    history_view,
    paginate,
    total_hours,
)
from timesheet.analysis.reports import ReportGenerator
from timesheet.cli.config_commands import config, load_config
from timesheet.core.config import ConfigManager
from timesheet.core.models import Project, TimeEntry
from timesheet.core.registry import is_valid_color
from timesheet.core.session import ticks
from timesheet.core.storage import StorageManager
from timesheet.core.tracker import TimeTracker

console = Console()
error_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_NAMES = ("timesheet-file", "timesheet-console")


def setup_logging(log_dir: Path, level_name: str, verbose: bool = False) -> None:
    """Send log records to the log file, and to stderr when verbose."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() in _HANDLER_NAMES:
            root_logger.removeHandler(handler)
            handler.close()

    log_level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    root_logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / "timesheet.log", encoding="utf-8")
    file_handler.set_name("timesheet-file")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.set_name("timesheet-console")
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)


def fail(message: str) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def get_config(ctx: click.Context) -> ConfigManager:
    if "config" not in ctx.obj:
        ctx.obj["config"] = load_config(ctx)
    return ctx.obj["config"]


def get_tracker(ctx: click.Context) -> TimeTracker:
    """Get TimeTracker instance using the configured data directory."""
    config_mgr = get_config(ctx)
    data_dir = ctx.obj.get("data_dir")
    storage = StorageManager(Path(data_dir) if data_dir else config_mgr.data_dir)

    setup_logging(
        storage.log_dir,
        config_mgr.get("advanced.log_level", "WARNING"),
        ctx.obj.get("verbose", False),
    )

    if config_mgr.get("advanced.backup_on_start"):
        storage.backup()

    try:
        return TimeTracker(storage)
    except ValueError as e:
        fail(str(e))


def resolve_project(tracker: TimeTracker, id_or_name: str) -> Project:
    project = tracker.projects.find(id_or_name)
    if project is None:
        fail(f"Project not found: {id_or_name}")
    return project


def parse_day(value: Optional[str], option: str) -> Optional[str]:
    """Normalize a date option to YYYY-MM-DD."""
    if not value:
        return None

    today = datetime.now().date()
    if value.lower() == "today":
        return today.isoformat()
    if value.lower() == "yesterday":
        return (today - timedelta(days=1)).isoformat()

    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
    except ValueError:
        fail(f"Invalid date format for {option}. Use YYYY-MM-DD, 'today', or 'yesterday'")


def project_filter(tracker: TimeTracker, value: Optional[str]) -> Optional[str]:
    """Turn a --project option into a project ID filter.

    Unknown values are used as raw IDs so deleted projects can still be
    filtered on.
    """
    if not value or value == ALL_PROJECTS:
        return None
    project = tracker.projects.find(value)
    return project.id if project else value


def describe_entry(entry: TimeEntry, seconds: int) -> str:
    content = f"""[bold]{entry.project_name}[/bold]

[dim]Started:[/dim] {entry.start_time.strftime("%Y-%m-%d %H:%M:%S")}
[dim]Duration:[/dim] {format_clock(seconds)}"""
    if entry.edited:
        content += f"\n[dim]Measured:[/dim] {format_clock(entry.duration)}"
    return content


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--config", "config_path", help="Custom config file", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-v", "--verbose", is_flag=True, help="Log to stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    no_color: bool,
    verbose: bool,
) -> None:
    """Timesheet - track time against projects.

    Start and stop a timer, review past entries, and see where your hours go.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    if no_color:
        console.no_color = True


cli.add_command(config)


# Timer


@cli.command()
@click.argument("project")
@click.pass_context
def start(ctx: click.Context, project: str) -> None:
    """Start the timer for a project (ID or exact name).

    Example:
        timesheet start "UI/UX Design"
    """
    tracker = get_tracker(ctx)
    target = resolve_project(tracker, project)

    if tracker.session.is_running:
        current = tracker.status()
        fail(f"Timer already running: {current.project_name if current else '?'}. Stop it first.")

    if tracker.session.is_stopped:
        console.print("[yellow]Discarded unsaved entry[/yellow]")

    entry = tracker.start(target.id)
    if entry is None:
        fail("Could not start timer")

    console.print(f"[green]✓[/green] Started tracking: {entry.project_name}")
    console.print(f"  Started: {entry.start_time.strftime('%Y-%m-%d %H:%M:%S')}")


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the running timer. The entry stays staged until saved.

    Example:
        timesheet stop
    """
    tracker = get_tracker(ctx)
    entry = tracker.stop()
    if entry is None:
        fail("No timer is currently running")

    console.print(f"[green]✓[/green] Stopped tracking: {entry.project_name}")
    console.print(f"  Duration: {format_clock(entry.duration)}")
    console.print("\nSave with [cyan]timesheet save[/cyan] or adjust with [cyan]timesheet edit-time[/cyan]")


@cli.command("edit-time", context_settings={"ignore_unknown_options": True})
@click.argument("hours")
@click.argument("minutes")
@click.argument("seconds")
@click.pass_context
def edit_time(ctx: click.Context, hours: str, minutes: str, seconds: str) -> None:
    """Override the duration of the stopped, unsaved entry.

    Non-numeric and negative values count as zero.

    Example:
        timesheet edit-time 1 30 0
    """
    tracker = get_tracker(ctx)
    entry = tracker.edit_current_duration(hours, minutes, seconds)
    if entry is None:
        fail("No stopped entry to edit. Stop the timer first.")

    console.print(f"[green]✓[/green] Duration set to {format_clock(entry.effective_duration)}")


@cli.command()
@click.pass_context
def save(ctx: click.Context) -> None:
    """Save the stopped entry to the history.

    Example:
        timesheet save
    """
    tracker = get_tracker(ctx)
    entry = tracker.save()
    if entry is None:
        fail("No stopped entry to save")

    console.print(
        f"[green]✓[/green] Saved {format_clock(entry.effective_duration)} on {entry.project_name}"
    )


@cli.command()
@click.pass_context
def discard(ctx: click.Context) -> None:
    """Throw away the stopped entry without saving it."""
    tracker = get_tracker(ctx)
    if tracker.discard():
        console.print("[yellow]✓[/yellow] Unsaved entry discarded")
    else:
        console.print("[yellow]No stopped entry to discard[/yellow]")


@cli.command()
@click.option("-w", "--watch", is_flag=True, help="Keep the clock ticking until Ctrl+C")
@click.pass_context
def status(ctx: click.Context, watch: bool) -> None:
    """Show the current session and today's total.

    Example:
        timesheet status
        timesheet status --watch
    """
    tracker = get_tracker(ctx)
    entry = tracker.status()

    today_total = day_total_seconds(tracker.get_entries(), datetime.now().date())

    if entry is None:
        console.print("[yellow]No timer running[/yellow]")
        console.print('\nStart tracking with: [cyan]timesheet start "Project"[/cyan]')
    elif tracker.session.is_running:
        if watch:
            interval = get_config(ctx).get("timer.tick_interval", 1.0)
            try:
                with Live(console=console, refresh_per_second=4) as live:
                    for seconds in ticks(tracker.session, interval):
                        live.update(
                            Panel(describe_entry(entry, seconds), title="Running", border_style="green")
                        )
            except KeyboardInterrupt:
                pass
            return
        console.print(
            Panel(describe_entry(entry, tracker.elapsed()), title="Running", border_style="green")
        )
    else:
        console.print(
            Panel(
                describe_entry(entry, tracker.elapsed()),
                title="Stopped (unsaved)",
                border_style="yellow",
            )
        )

    console.print(f"\n[dim]Today's total:[/dim] {today_total // 3600}h {(today_total % 3600) // 60}m")
    console.print(f"[dim]Total entries:[/dim] {len(tracker.entries)}")


# History


@cli.command()
@click.option("-p", "--project", help="Filter by project ID or name ('all' for every project)")
@click.option("--from", "from_date", help="First day (YYYY-MM-DD)")
@click.option("--to", "to_date", help="Last day (YYYY-MM-DD)")
@click.option("--page", default=1, type=int, help="Page number")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def log(
    ctx: click.Context,
    project: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
    page: int,
    as_json: bool,
) -> None:
    """List saved entries, most recent first.

    Example:
        timesheet log
        timesheet log -p "UI/UX Design" --from 2025-01-01 --to 2025-01-31
        timesheet log --page 2
    """
    tracker = get_tracker(ctx)
    view = history_view(
        tracker.get_entries(),
        project_filter(tracker, project),
        parse_day(from_date, "--from"),
        parse_day(to_date, "--to"),
    )

    if not view:
        if len(tracker.entries) == 0:
            console.print("[yellow]No time entries yet. Start tracking time to see entries here.[/yellow]")
        else:
            console.print("[yellow]No entries found. Try adjusting your filters.[/yellow]")
        return

    result = paginate(view, page, get_config(ctx).get("history.page_size", 10))

    if as_json:
        print(json.dumps([e.to_dict() for e in result.items], indent=2))
        return

    ReportGenerator(console).history_report(
        result, tracker.projects.to_list(), get_config(ctx).get("display.show_seconds", True)
    )
    console.print(f"[dim]Total:[/dim] [bold]{total_hours(view):.1f}h[/bold]")


@cli.group()
def entry() -> None:
    """Edit or delete saved entries."""


@entry.command("edit", context_settings={"ignore_unknown_options": True})
@click.argument("entry_id")
@click.argument("hours")
@click.argument("minutes")
@click.argument("seconds")
@click.pass_context
def entry_edit(ctx: click.Context, entry_id: str, hours: str, minutes: str, seconds: str) -> None:
    """Override the duration of a saved entry.

    Example:
        timesheet entry edit <id> 2 0 0
    """
    tracker = get_tracker(ctx)
    updated = tracker.edit_entry_duration(entry_id, hours, minutes, seconds)
    if updated is None:
        fail(f"Entry not found: {entry_id}")

    console.print(
        f"[green]✓[/green] Duration set to {format_clock(updated.effective_duration)} "
        f"(measured {format_clock(updated.duration)})"
    )


@entry.command("delete")
@click.argument("entry_id")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def entry_delete(ctx: click.Context, entry_id: str, yes: bool) -> None:
    """Delete a saved entry. This cannot be undone."""
    tracker = get_tracker(ctx)
    if tracker.entries.get(entry_id) is None:
        fail(f"Entry not found: {entry_id}")

    if not yes and not click.confirm("Are you sure you want to delete this time entry?"):
        console.print("Cancelled")
        return

    tracker.delete_entry(entry_id)
    console.print("[green]✓[/green] Entry deleted")


# Projects


@cli.group()
def projects() -> None:
    """Manage projects."""


@projects.command("list")
@click.pass_context
def projects_list(ctx: click.Context) -> None:
    """List projects."""
    tracker = get_tracker(ctx)
    if len(tracker.projects) == 0:
        console.print("[yellow]No projects yet[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Color")
    table.add_column("Created", style="cyan")

    for project in tracker.projects:
        table.add_row(
            project.id,
            project.name,
            Text("● ", style=project.color) + Text(project.color),
            project.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


@projects.command("add")
@click.argument("name")
@click.option("--color", help="Color as #RRGGBB")
@click.pass_context
def projects_add(ctx: click.Context, name: str, color: Optional[str]) -> None:
    """Add a project.

    Example:
        timesheet projects add "Research" --color "#8B5CF6"
    """
    tracker = get_tracker(ctx)
    color = color or get_config(ctx).get("projects.default_color", "#3B82F6")
    if not is_valid_color(color):
        fail(f"Invalid color: {color}. Use #RRGGBB")

    project = tracker.add_project(name, color)
    if project is None:
        fail("Project name cannot be empty")

    console.print(f"[green]✓[/green] Added project: {project.name}")
    console.print(f"  ID: {project.id}")


@projects.command("edit")
@click.argument("project")
@click.option("--name", help="New name")
@click.option("--color", help="New color as #RRGGBB")
@click.pass_context
def projects_edit(ctx: click.Context, project: str, name: Optional[str], color: Optional[str]) -> None:
    """Rename or recolor a project. Saved entries pick up the new name."""
    tracker = get_tracker(ctx)
    target = resolve_project(tracker, project)

    if color and not is_valid_color(color):
        fail(f"Invalid color: {color}. Use #RRGGBB")

    updated = tracker.update_project(
        target.id, name if name is not None else target.name, color or target.color
    )
    if updated is None:
        fail("Project name cannot be empty")

    console.print(f"[green]✓[/green] Updated project: {updated.name}")


@projects.command("delete")
@click.argument("project")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def projects_delete(ctx: click.Context, project: str, yes: bool) -> None:
    """Delete a project. Its time entries are kept."""
    tracker = get_tracker(ctx)
    target = resolve_project(tracker, project)

    if not yes and not click.confirm(
        "Are you sure you want to delete this project? "
        "Time entries will be preserved but marked as deleted."
    ):
        console.print("Cancelled")
        return

    tracker.delete_project(target.id)
    console.print(f"[green]✓[/green] Deleted project: {target.name}")


# Reports


@cli.command()
@click.argument("type", type=click.Choice(["summary", "daily", "weekly"]), default="summary")
@click.option("-p", "--project", help="Filter by project ID or name")
@click.option("--from", "from_date", help="First day (YYYY-MM-DD)")
@click.option("--to", "to_date", help="Last day (YYYY-MM-DD)")
@click.pass_context
def report(
    ctx: click.Context,
    type: str,
    project: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
) -> None:
    """Show charts of where the time went.

    Types:
        summary - Totals and time by project
        daily   - Hours per day
        weekly  - Hours per week

    Examples:
        timesheet report
        timesheet report daily --from 2025-01-01
        timesheet report weekly -p "Software Engineering"
    """
    tracker = get_tracker(ctx)
    config_mgr = get_config(ctx)

    day_from = parse_day(from_date, "--from")
    day_to = parse_day(to_date, "--to")
    entries = history_view(tracker.get_entries(), project_filter(tracker, project), day_from, day_to)

    period_label = "All Time"
    if day_from and day_to:
        period_label = f"{day_from} to {day_to}"
    elif day_from:
        period_label = f"From {day_from}"
    elif day_to:
        period_label = f"Up to {day_to}"

    report_gen = ReportGenerator(console)
    daily_days = config_mgr.get("charts.daily_days", 30)

    if type == "summary":
        report_gen.summary_report(entries, tracker.projects.to_list(), period_label, daily_days)
    elif type == "daily":
        report_gen.daily_report(entries, daily_days)
    elif type == "weekly":
        report_gen.weekly_report(
            entries,
            config_mgr.get("charts.weekly_weeks", 8),
            config_mgr.get("general.week_start", "sunday"),
        )


if __name__ == "__main__":
    cli(obj={})
