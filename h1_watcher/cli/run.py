"""Run command: execute one watcher pass and display the outcome."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from h1_watcher.cli.utils import (
    display_info,
    display_success,
    display_warning,
    handle_errors,
    load_settings,
    setup_logging,
)
from h1_watcher.observability.context import run_id_context
from h1_watcher.orchestration import RunResult, WatcherPipeline


@handle_errors
def run_command(
    state_path: Optional[Path] = typer.Option(
        None, "--state-path", "-s", help="State file (default: $DB_PATH or state/db.json)"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML config file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"
    ),
    console_logs: bool = typer.Option(
        False, "--console-logs", help="Human-readable logs instead of JSON"
    ),
):
    """Poll HackerOne once, alert on new programs and update state."""
    overrides = {
        "state_path": str(state_path) if state_path else None,
        "log_level": log_level,
        "log_format": "console" if console_logs else None,
    }
    settings = load_settings(config_path, overrides)
    setup_logging(settings)

    pipeline = WatcherPipeline.from_settings(settings)

    with run_id_context():
        result = asyncio.run(pipeline.run())

    _display_results(result)


def _display_results(result: RunResult) -> None:
    if result.state_recovered_reason and result.state_recovered_reason != "missing":
        display_warning(f"State file was {result.state_recovered_reason}; started fresh")

    if not result.new_programs:
        display_info(
            f"No new programs ({result.total_programs} public, "
            f"{result.tracked_programs} tracked)"
        )
        return

    display_success(f"{result.new_count} new program(s) found:")
    for program in result.new_programs:
        typer.echo(f" - {program.name} ({program.handle})")

    for channel, ok in result.notification_results.items():
        if ok:
            display_success(f"✓ {channel} notified")
        else:
            display_warning(f"✗ {channel} not notified")

    if result.recon_dispatched:
        display_success("✓ Recon dispatched")

    typer.echo(f"Tracked programs: {result.tracked_programs}")
