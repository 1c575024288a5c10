"""Run ID context management for log correlation.

Each watcher pass gets a run ID stored in a ContextVar, so every log line
emitted during the pass can be tied back to it.

Usage:
    from h1_watcher.observability.context import run_id_context

    with run_id_context() as run_id:
        await pipeline.run()
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

_run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def new_run_id() -> str:
    """Short random identifier for one pass."""
    return uuid.uuid4().hex[:12]


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set the run ID for the current context, generating one if omitted."""
    if run_id is None:
        run_id = new_run_id()
    _run_id_var.set(run_id)
    return run_id


def get_run_id() -> Optional[str]:
    return _run_id_var.get()


def clear_run_id() -> None:
    _run_id_var.set(None)


@contextmanager
def run_id_context(run_id: Optional[str] = None) -> Generator[str, None, None]:
    """Scope a run ID, restoring the previous value on exit."""
    if run_id is None:
        run_id = new_run_id()

    token = _run_id_var.set(run_id)
    try:
        yield run_id
    finally:
        _run_id_var.reset(token)
