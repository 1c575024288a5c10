"""Data models: configuration, programs, persisted state, notifications."""

from h1_watcher.models.config import (
    DiscordConfig,
    HackerOneConfig,
    ReconConfig,
    RetryConfig,
    TelegramConfig,
    WatcherSettings,
)
from h1_watcher.models.notification import NotificationResult
from h1_watcher.models.program import Program, WatcherState

__all__ = [
    "DiscordConfig",
    "HackerOneConfig",
    "ReconConfig",
    "RetryConfig",
    "TelegramConfig",
    "WatcherSettings",
    "NotificationResult",
    "Program",
    "WatcherState",
]
