"""Orchestration of a single watcher pass."""

from h1_watcher.orchestration.result import RunResult, Stage
from h1_watcher.orchestration.watcher_pipeline import WatcherPipeline

__all__ = [
    "RunResult",
    "Stage",
    "WatcherPipeline",
]
