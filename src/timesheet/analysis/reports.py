"""Report rendering for time tracking data."""

from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from timesheet.analysis.aggregation import (
    DEFAULT_DAILY_DAYS,
    DEFAULT_WEEKLY_WEEKS,
    Page,
    average_daily_hours,
    daily_series,
    format_clock,
    format_duration,
    project_series,
    total_seconds,
    weekly_series,
)
from timesheet.core.models import FALLBACK_COLOR, Project, TimeEntry


class ReportGenerator:
    """Render summaries and charts of time entries to the console."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def summary_report(
        self,
        entries: list[TimeEntry],
        projects: list[Project],
        period_label: str = "Summary",
        daily_days: int = DEFAULT_DAILY_DAYS,
    ) -> None:
        """Show overall totals and the per-project breakdown.

        Args:
            entries: Entries to analyze
            projects: Known projects, for names and colors
            period_label: Label for the report period
            daily_days: How many recent days the daily average covers
        """
        if not entries:
            self.console.print("[yellow]No entries found for this period[/yellow]")
            return

        total = total_seconds(entries)
        days = daily_series(entries, daily_days)
        by_project = project_series(entries, projects)

        self.console.print(f"\n[bold cyan]Timesheet - {period_label}[/bold cyan]\n")

        overview_table = Table(show_header=False, box=None, padding=(0, 2))
        overview_table.add_column(style="dim")
        overview_table.add_column(style="bold")

        overview_table.add_row("Total Hours:", f"{total / 3600:.1f}h")
        overview_table.add_row("Entries:", str(len(entries)))
        overview_table.add_row(
            f"Average Daily (last {len(days)} days):",
            f"{average_daily_hours(days):.1f}h",
        )
        overview_table.add_row("Active Projects:", str(len(by_project)))

        self.console.print(overview_table)
        self.console.print()

        project_table = Table(title="Time by Project")
        project_table.add_column("Project", style="cyan")
        project_table.add_column("Hours", style="magenta", justify="right")
        project_table.add_column("Entries", justify="right")
        project_table.add_column("% Total", style="green", justify="right")
        project_table.add_column("Bar")

        for bucket in by_project:
            pct = bucket.share(total)
            project_table.add_row(
                Text("● ", style=bucket.color) + Text(bucket.name),
                f"{bucket.hours:.1f}h",
                str(bucket.entries),
                f"{pct:.1f}%",
                self._create_bar(pct, color=bucket.color),
            )

        self.console.print(project_table)

    def daily_report(self, entries: list[TimeEntry], limit: int = DEFAULT_DAILY_DAYS) -> None:
        """Show hours per day for the most recent days with entries."""
        days = daily_series(entries, limit)
        if not days:
            self.console.print("[yellow]No entries found for this period[/yellow]")
            return

        peak = max(d.seconds for d in days) or 1

        table = Table(title=f"Daily Hours (Last {limit} Days)")
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Projects")
        table.add_column("Bar")

        for day in days:
            breakdown = ", ".join(
                f"{name} {seconds / 3600:.1f}h" for name, seconds in day.by_project.items()
            )
            table.add_row(
                day.date,
                f"{day.hours:.1f}h",
                breakdown,
                self._create_bar(day.seconds / peak * 100, color="#3B82F6"),
            )

        self.console.print(table)
        self.console.print(
            f"\n[dim]Average daily:[/dim] [bold]{average_daily_hours(days):.1f}h[/bold]"
        )

    def weekly_report(
        self,
        entries: list[TimeEntry],
        limit: int = DEFAULT_WEEKLY_WEEKS,
        week_start: str = "sunday",
    ) -> None:
        """Show hours per week for the most recent weeks with entries."""
        weeks = weekly_series(entries, limit, week_start)
        if not weeks:
            self.console.print("[yellow]No entries found for this period[/yellow]")
            return

        peak = max(w.seconds for w in weeks) or 1

        table = Table(title="Weekly Hours")
        table.add_column("Week of", style="cyan", no_wrap=True)
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Bar")

        for week in weeks:
            table.add_row(
                week.week_start,
                f"{week.hours:.1f}h",
                self._create_bar(week.seconds / peak * 100, color="#10B981"),
            )

        self.console.print(table)

    def history_report(
        self,
        page: Page,
        projects: list[Project],
        show_seconds: bool = True,
    ) -> None:
        """Show one page of the entry history."""
        colors = {p.id: p.color for p in projects}

        table = Table(title="Time Entries")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Project")
        table.add_column("Started")
        table.add_column("Duration", style="magenta", justify="right")

        for entry in page.items:
            seconds = entry.effective_duration
            duration = format_clock(seconds) if show_seconds else format_duration(seconds)
            if entry.edited:
                duration += " (edited)"

            table.add_row(
                entry.id,
                entry.date,
                Text("● ", style=colors.get(entry.project_id, FALLBACK_COLOR))
                + Text(entry.project_name),
                entry.start_time.strftime("%H:%M"),
                duration,
            )

        self.console.print(table)
        self.console.print(
            f"Showing {page.start_index} to {page.end_index} of {page.total_count} entries "
            f"(page {page.page} of {max(page.total_pages, 1)})"
        )

    def _create_bar(self, percentage: float, width: int = 25, color: str = "blue") -> Text:
        """Create a visual bar for percentage display.

        Args:
            percentage: Percentage value (0-100)
            width: Width of the bar in characters
            color: Style for the filled part

        Returns:
            Rich Text object with colored bar
        """
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style=color)
        bar.append("░" * empty, style="dim")

        return bar
