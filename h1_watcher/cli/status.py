"""Status command: summarize the persisted state file."""

from pathlib import Path
from typing import Optional

import typer

from h1_watcher.cli.utils import display_info, display_warning, handle_errors, load_settings
from h1_watcher.services.state_store import StateStore


@handle_errors
def status_command(
    state_path: Optional[Path] = typer.Option(
        None, "--state-path", "-s", help="State file (default: $DB_PATH or state/db.json)"
    ),
):
    """Show tracked program count and last run time."""
    path = str(state_path) if state_path else load_settings().state_path
    summary = StateStore(path).summary()

    display_info(f"State file: {summary['path']}")
    if summary["recovered_reason"]:
        display_warning(f"State is empty ({summary['recovered_reason']})")

    typer.echo(f"Tracked programs: {summary['tracked_programs']}")
    typer.echo(f"Last run: {summary['last_run'] or 'never'}")
