"""Console rendering of reconciliation reports."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from search_schema.models import Action, EntityKind, RunMode, SyncReport

ACTION_STYLES = {
    Action.CREATED: "green",
    Action.UPDATED: "yellow",
    Action.UNCHANGED: "white",
    Action.REMOVED: "red",
    Action.ABSENT: "dim",
    Action.SKIPPED: "magenta",
}


def build_summary_table(report: SyncReport) -> Table:
    table = Table(title=f"Search schema {report.mode.value} summary")
    table.add_column("Entity", style="cyan", no_wrap=True)
    for action in Action:
        table.add_column(action.value.capitalize(), style=ACTION_STYLES[action], justify="right")

    counts = report.counts()
    for kind in EntityKind:
        row = [counts.get((kind, action), 0) for action in Action]
        if not any(row):
            continue
        table.add_row(kind.value, *(str(n) if n else "" for n in row))
    return table


def build_stale_table(report: SyncReport) -> Table:
    table = Table(title="Crawled properties left in place")
    table.add_column("Category", style="cyan")
    table.add_column("Crawled property", style="white")
    for category, name in report.stale_crawled_properties:
        table.add_row(escape(category), escape(name))
    return table


def render_report(report: SyncReport, console: Optional[Console] = None) -> None:
    """Print the per-kind action summary, plus manual cleanup hints after undeploy."""
    console = console or Console()
    if not report.actions:
        console.print("[yellow]Schema document declares nothing to reconcile[/yellow]")
    else:
        console.print(build_summary_table(report))

    for entry in report.actions:
        if entry.action in (Action.CREATED, Action.UPDATED, Action.REMOVED):
            detail = f" ({escape(entry.detail)})" if entry.detail else ""
            style = ACTION_STYLES[entry.action]
            console.print(
                f"  [{style}]{entry.action.value:>8}[/{style}] "
                f"{entry.kind.value}: {escape(entry.name)}{detail}",
                highlight=False,
            )

    if report.mode == RunMode.UNDEPLOY and report.stale_crawled_properties:
        console.print(build_stale_table(report))
        console.print(
            "[yellow]Crawled properties and categories are never removed automatically. "
            "Remove them manually if no other managed property needs them: "
            f"{escape(', '.join(report.stale_categories))}[/yellow]"
        )
    elif not report.changed:
        console.print("[green]Search schema already up to date[/green]")
