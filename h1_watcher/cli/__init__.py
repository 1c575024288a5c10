"""h1-watcher CLI package.

Usage:
    python -m h1_watcher run --state-path state/db.json
    python -m h1_watcher validate
    python -m h1_watcher status
"""

import typer

from h1_watcher.cli.run import run_command
from h1_watcher.cli.status import status_command
from h1_watcher.cli.validate import validate_command

app = typer.Typer(help="h1-watcher: alert on newly public HackerOne programs")

app.command(name="run")(run_command)
app.command(name="validate")(validate_command)
app.command(name="status")(status_command)

__all__ = [
    "app",
    "run_command",
    "validate_command",
    "status_command",
]
