"""Click entry point: run the API server and the maintenance commands."""

from __future__ import annotations

import asyncio

import click
import uvicorn

from research_helper.config import Settings, load_settings
from research_helper.infrastructure.db import Database
from research_helper.services.consistency import check_consistency
from research_helper.services.projects import ProjectStore
from research_helper.ui.rendering import console, setup_logging, show_consistency, show_migration


@click.group()
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help="Load settings from this .env file.")
@click.pass_context
def cli(ctx: click.Context, env_file: str | None):
    """Research Helper: projects, notes, citations and tasks for your research."""
    settings = load_settings(env_file)
    setup_logging(settings.log_level)
    ctx.obj = settings


@cli.command()
@click.option("--host", default=None, help="Interface to bind (default from HOST).")
@click.option("--port", type=int, default=None, help="Port to listen on (default from PORT).")
@click.option("--reload", is_flag=True, help="Restart on code changes.")
@click.pass_obj
def serve(settings: Settings, host: str | None, port: int | None, reload: bool):
    """Run the REST API."""
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold]Research Helper[/bold] API on http://{host}:{port}")
    uvicorn.run("research_helper.api.app:app", host=host, port=port, reload=reload, log_config=None)


@cli.command()
@click.pass_obj
def migrate(settings: Settings):
    """Move projects from id-keyed directories onto name-keyed ones."""
    db = Database(settings.db_path)
    try:
        results = asyncio.run(ProjectStore(db, settings.projects_dir).migrate_project_directories())
    finally:
        db.close()
    show_migration(results)
    if any(r.action == "failed" for r in results):
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def check(settings: Settings):
    """Report rows whose project directory, note file or PDF is missing."""
    db = Database(settings.db_path)
    try:
        report = asyncio.run(check_consistency(db))
    finally:
        db.close()
    show_consistency(report)
    if not report.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
