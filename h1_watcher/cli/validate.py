"""Validate command: check configuration without touching the network."""

from pathlib import Path
from typing import Optional

import typer

from h1_watcher.cli.utils import (
    display_success,
    display_warning,
    handle_errors,
    load_settings,
)


def _status(flag: bool) -> str:
    return "configured" if flag else "not configured"


@handle_errors
def validate_command(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML config file"
    ),
):
    """Validate configuration and report which channels are active."""
    settings = load_settings(config_path)

    display_success("Configuration is valid! ✅")

    has_credentials = bool(settings.hackerone.username and settings.hackerone.token)
    if has_credentials:
        typer.echo(" - HackerOne credentials: present")
    else:
        display_warning(" - HackerOne credentials: missing (H1_API_USERNAME, H1_API_TOKEN)")

    typer.echo(f" - Telegram: {_status(settings.telegram.configured)}")
    typer.echo(f" - Discord: {_status(settings.discord.configured)}")

    recon = settings.recon
    if recon.enabled:
        typer.echo(f" - Recon dispatch: enabled ({recon.repository or 'no repository'})")
    else:
        typer.echo(" - Recon dispatch: disabled")

    typer.echo(f" - State file: {settings.state_path}")
