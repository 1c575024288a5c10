"""Observability: run ID context, structured logging, secret redaction.

Usage:
    from h1_watcher.observability import configure_logging, run_id_context

    configure_logging(level="INFO", secrets=settings.secret_values())
    with run_id_context():
        ...
"""

from h1_watcher.observability.context import (
    clear_run_id,
    get_run_id,
    run_id_context,
    set_run_id,
)
from h1_watcher.observability.logging import (
    add_run_id_processor,
    bind_context,
    clear_context,
    configure_logging,
)
from h1_watcher.observability.redaction import (
    REDACTED,
    GitHubMaskEmitter,
    SecretMasker,
)

__all__ = [
    # Context
    "set_run_id",
    "get_run_id",
    "clear_run_id",
    "run_id_context",
    # Logging
    "configure_logging",
    "add_run_id_processor",
    "bind_context",
    "clear_context",
    # Redaction
    "REDACTED",
    "SecretMasker",
    "GitHubMaskEmitter",
]
