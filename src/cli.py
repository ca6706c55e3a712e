#!/usr/bin/env python3
"""Command Line Interface for the RevSend CRM API.

Usage:
    cd src
    python cli.py server              # Start API server
    python cli.py init-db             # Create missing tables
    python cli.py score --org <id>    # Score unscored contacts
    python cli.py stats --org <id>    # Show lead-score statistics
    python cli.py info                # Show configuration
"""
from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from core.config import get_settings
from core.db import get_session
from core.logging_config import get_logger, setup_logging

LOGGER = get_logger(__name__)
SETTINGS = get_settings()

app = typer.Typer(help="RevSend CRM CLI")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """RevSend CRM - lead scoring and notifications API."""
    log_level = "DEBUG" if verbose else SETTINGS.log_level
    setup_logging(level=log_level, json_format=SETTINGS.log_format == "json")


# =============================================================================
# Database Commands
# =============================================================================


@app.command("init-db")
def init_database(
    all_tables: bool = typer.Option(False, "--all", help="Create every table, not only missing ones"),
) -> None:
    """Create database tables."""
    from core.db import init_db

    result = init_db(create_missing_only=not all_tables)
    if result["status"] == "error":
        typer.secho(f"✗ Database init failed: {result.get('error')}", fg="red")
        raise typer.Exit(1)

    created = result["tables_created"]
    typer.secho(f"✓ Database ready ({len(created)} tables created)", fg="green")
    for warning in result["warnings"]:
        typer.secho(f"  ! {warning}", fg="yellow")


# =============================================================================
# Scoring Commands
# =============================================================================


@app.command("score")
def score_contacts(
    org: str = typer.Option(..., "--org", help="Organization id"),
    limit: Optional[int] = typer.Option(None, help="Max contacts to score"),
) -> None:
    """Score contacts of an organization that were never scored."""
    from domain.scoring import ScoringService

    typer.echo(f"Scoring contacts of organization {org}...")
    with get_session() as session:
        scored = ScoringService(session).bulk_score_contacts(org, limit=limit)

    typer.secho(f"✓ {scored} contatos foram pontuados", fg="green")


@app.command("stats")
def scoring_stats(
    org: str = typer.Option(..., "--org", help="Organization id"),
) -> None:
    """Show lead-score statistics for an organization."""
    from domain.scoring import ScoringService

    with get_session() as session:
        stats = ScoringService(session).get_scoring_stats(org)

    typer.echo(f"Lead Scoring ({org}):")
    typer.echo(f"  Total Scored: {stats.total_scored}")
    typer.echo(f"  Average Score: {stats.average_score}")
    for status, count in stats.status_distribution.items():
        typer.echo(f"  {status}: {count}")


# =============================================================================
# Server Commands
# =============================================================================


@app.command("server")
def run_server(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    typer.echo(f"Starting API server on {host}:{port}...")
    uvicorn.run("api.app:app", host=host, port=port, reload=reload)


@app.command("info")
def show_info() -> None:
    """Show application configuration info."""
    typer.echo("RevSend CRM Configuration:")
    typer.echo(f"  Environment: {SETTINGS.environment}")
    typer.echo(f"  Locale: {SETTINGS.locale}")
    typer.echo(f"  Log Level: {SETTINGS.log_level}")
    typer.echo(f"  Database: {SETTINGS.database_url}")
    typer.echo(f"  Token Lifetime: {SETTINGS.jwt_access_token_expire_minutes} min")
    typer.echo(f"  Bulk Score Limit: {SETTINGS.bulk_score_limit}")
    typer.echo(
        "  Weights: "
        f"sentiment={SETTINGS.score_weight_sentiment} "
        f"response_time={SETTINGS.score_weight_response_time} "
        f"engagement={SETTINGS.score_weight_engagement} "
        f"keywords={SETTINGS.score_weight_keywords}"
    )


if __name__ == "__main__":
    app()
