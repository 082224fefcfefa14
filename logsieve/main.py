from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from logsieve.admission.engine import utc_now
from logsieve.config import get_settings
from logsieve.ingest import IngestConfig, read_candidates, run_ingest
from logsieve.reporter import print_summary
from logsieve.storage.abstract import LogStorage
from logsieve.storage.memory import InMemoryLogStorage
from logsieve.storage.postgres import PostgresLogStorage
from logsieve.utils.logging import configure_logging

app = typer.Typer(help="logsieve: deduplicating log admission for a JSONB log store.")


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"table={settings.logs_table} | max_bytes={settings.log_max_bytes} "
        f"window={settings.duplicate_window_seconds}s severe_window={settings.severe_window_seconds}s "
        f"retention={settings.retention_days}d"
    )


@app.command("init-db")
def init_db(
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Create the logs table and its partial indexes.
    """
    _setup_logging()
    storage = PostgresLogStorage(dsn_override=dsn)
    try:
        storage.ensure_schema()
    finally:
        storage.close()
    typer.echo(f"Schema ready for table '{storage.table}'.")


@app.command()
def ingest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSONL file of candidates."),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-c",
        help="Worker threads (default from settings).",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Stop at the first storage or validation failure.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Admit into an in-memory store instead of Postgres.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Admit every candidate in a JSONL file and print an outcome summary.
    """
    _setup_logging()
    storage: LogStorage = InMemoryLogStorage() if dry_run else PostgresLogStorage(dsn_override=dsn)
    config = IngestConfig(
        concurrency=concurrency,
        failure_policy="strict" if strict else None,
    )
    try:
        summary = run_ingest(read_candidates(path), storage, config)
    finally:
        storage.close()

    if as_json:
        typer.echo(json.dumps(summary.as_dict(), indent=2))
    else:
        print_summary(summary)


@app.command()
def purge(
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Delete logs past their retention expiry.
    """
    _setup_logging()
    storage = PostgresLogStorage(dsn_override=dsn)
    try:
        purged = storage.purge_expired(utc_now())
    finally:
        storage.close()
    typer.echo(f"Purged {purged} expired log(s).")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
