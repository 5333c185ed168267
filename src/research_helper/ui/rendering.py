"""Rich console helpers: logging setup and report tables."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from research_helper.services.consistency import ConsistencyReport
from research_helper.services.projects import MigrationResult

console = Console()

_ACTION_STYLES = {
    "unchanged": "dim",
    "migrated": "green",
    "created": "cyan",
    "failed": "red",
}


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def show_migration(results: list[MigrationResult]) -> None:
    if not results:
        console.print("[dim]No projects to migrate.[/dim]")
        return
    table = Table(title="Project Directory Migration", show_lines=True)
    table.add_column("ID", style="cyan", width=4)
    table.add_column("Name", style="green")
    table.add_column("Action")
    table.add_column("From", style="white", max_width=50)
    table.add_column("To", style="white", max_width=50)
    table.add_column("Notes/Citations", style="yellow", width=16)
    for r in results:
        style = _ACTION_STYLES.get(r.action, "white")
        action = f"[{style}]{r.action}[/{style}]"
        if r.error:
            action += f"\n[red]{r.error}[/red]"
        table.add_row(
            str(r.project_id), r.name, action, r.old_path or "-", r.new_path or "-",
            f"{r.notes_updated}/{r.citations_updated}",
        )
    console.print(table)


def show_consistency(report: ConsistencyReport) -> None:
    console.print(
        f"Checked {report.projects_checked} project(s), {report.notes_checked} note(s), "
        f"{report.citations_checked} citation(s)."
    )
    if report.ok:
        console.print("[bold green]Database and files are consistent.[/bold green]")
        return
    table = Table(title="Consistency Problems", show_lines=True)
    table.add_column("Kind", style="magenta", width=9)
    table.add_column("ID", style="cyan", width=4)
    table.add_column("Path", style="white")
    table.add_column("Problem", style="red")
    for p in report.problems:
        table.add_row(p.kind, str(p.record_id), p.path or "-", p.detail)
    console.print(table)
