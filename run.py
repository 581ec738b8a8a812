#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the taskboard backend. All functionality is
accessible through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action init-db
    python run.py --action reconcile --owner alice
    python run.py --action config
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from taskboard.backend.core.logging import get_logger, log_with_source, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "init-db", "reconcile", "config", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host (for server action).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port (for server action).",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (for server action).",
)
@click.option(
    "--owner",
    default=None,
    help="User whose done notes are archived (for reconcile action).",
)
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    owner: str | None,
) -> None:
    """
    Taskboard Entry Point.

    Run the API server, create the database schema, backfill missed
    archive records, or inspect configuration.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Create tables
        python run.py --action init-db

        # Archive done notes that have no history record
        python run.py --action reconcile --owner alice

        # View loaded configuration
        python run.py --action config
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "init-db":
        init_database(logger)
    elif action == "reconcile":
        reconcile_archive(logger, owner)
    elif action == "config":
        show_config(logger)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from taskboard.backend.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "taskboard.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


async def _init_db() -> None:
    from taskboard.backend.core.database import dispose_engine, init_db

    try:
        await init_db()
    finally:
        await dispose_engine()


def init_database(logger) -> None:
    """Create all database tables that do not exist yet."""
    try:
        asyncio.run(_init_db())
    except Exception as e:
        logger.error("Database initialization failed", extra={"error": str(e)})
        click.echo(click.style(f"Error initializing database: {e}", fg="red"))
        sys.exit(1)

    click.echo(click.style("Database schema is up to date.", fg="green"))


async def _archive_missing(owner: str) -> int:
    from taskboard.backend.core.database import dispose_engine, get_session_factory
    from taskboard.backend.services.archive import ArchiveService

    try:
        async with get_session_factory()() as session:
            archived = await ArchiveService(session).archive_missing(owner)
            await session.commit()
        return archived
    finally:
        await dispose_engine()


def reconcile_archive(logger, owner: str | None) -> None:
    """Archive every done note of ``owner`` that has no history record."""
    if not owner:
        click.echo(click.style("Error: --owner is required for reconcile.", fg="red"), err=True)
        sys.exit(2)

    try:
        archived = asyncio.run(_archive_missing(owner))
    except Exception as e:
        logger.error("Reconciliation failed", extra={"owner": owner, "error": str(e)})
        click.echo(click.style(f"Error during reconciliation: {e}", fg="red"))
        sys.exit(1)

    log_with_source(logger, "cli", "info", "Reconciliation finished", owner=owner, archived=archived)
    click.echo(f"Archived {archived} note(s) for {owner}.")


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    try:
        from taskboard.backend.core.config import get_app_config

        app_config = get_app_config()
        sections = [
            ("Application Settings", app_config.application),
            ("Database Settings", app_config.database),
            ("Logging Settings", app_config.logging),
            ("Feature Flags", app_config.features),
            ("Lifecycle Settings", app_config.lifecycle),
        ]

        for title, section in sections:
            click.echo(f"{title} (from YAML):")
            click.echo("-" * 40)
            for key, value in section.model_dump().items():
                if isinstance(value, dict):
                    click.echo(f"  {key}:")
                    for k, v in value.items():
                        click.echo(f"    {k}: {v}")
                else:
                    click.echo(f"  {key}: {value}")
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def show_info(logger) -> None:
    """Display application information."""
    click.echo("Taskboard Backend")
    click.echo("=" * 40)

    try:
        from taskboard.backend.core.config import get_app_config

        app_config = get_app_config()
        click.echo(f"Name: {app_config.application.name}")
        click.echo(f"Version: {app_config.application.version}")
        click.echo(f"Description: {app_config.application.description}")
    except Exception as e:
        logger.warning("Could not load configuration", extra={"error": str(e)})
        click.echo("Name: Taskboard")

    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server     Start the development server")
    click.echo("  --action init-db    Create database tables")
    click.echo("  --action reconcile  Archive done notes missing from history (--owner)")
    click.echo("  --action config     Display configuration")
    click.echo("  --action info       Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v       Enable INFO level logging")
    click.echo("  --debug, -d         Enable DEBUG level logging")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
