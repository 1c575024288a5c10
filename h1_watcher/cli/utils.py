"""Shared CLI utilities.

Provides settings loading, logging setup, error handling and colored
output helpers for all commands.
"""

import functools
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

import structlog
import typer

from h1_watcher.models.config import WatcherSettings
from h1_watcher.observability.logging import configure_logging
from h1_watcher.observability.redaction import GitHubMaskEmitter
from h1_watcher.services.config_manager import ConfigManager
from h1_watcher.utils.exceptions import ConfigurationError, WatcherError

# Default logging until settings are known
configure_logging()
logger = structlog.get_logger()

F = TypeVar("F", bound=Callable)


def load_settings(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> WatcherSettings:
    """Load and validate settings.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    manager = ConfigManager(config_path=str(config_path) if config_path else None)
    try:
        return manager.load_settings(overrides)
    except ConfigurationError as e:
        typer.secho(f"Configuration Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def setup_logging(settings: WatcherSettings) -> None:
    """Reconfigure logging from settings and register masks on GitHub Actions."""
    configure_logging(
        level=settings.log_level,
        json_output=settings.log_format == "json",
        secrets=settings.secret_values(),
    )
    if settings.github_actions:
        GitHubMaskEmitter(settings.secret_values()).emit()


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling.

    Logs the failure and exits with code 1.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except WatcherError as e:
            logger.error("command_failed", error=str(e), error_type=type(e).__name__)
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        except Exception as e:
            logger.exception("command_failed")
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

    return wrapper  # type: ignore[return-value]


def display_success(message: str) -> None:
    typer.secho(message, fg=typer.colors.GREEN)


def display_warning(message: str) -> None:
    typer.secho(message, fg=typer.colors.YELLOW)


def display_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)


def display_info(message: str) -> None:
    typer.secho(message, fg=typer.colors.CYAN)
