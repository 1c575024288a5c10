"""Configuration models for the watcher.

Provides Pydantic models for:
- HackerOneConfig: catalog API credentials, pagination ceiling and retry policy
- TelegramConfig / DiscordConfig: notification channels
- ReconConfig: optional repository_dispatch side-channel
- WatcherSettings: container built once at process start and passed by
  parameter into every component

Usage:
    from h1_watcher.services.config_manager import ConfigManager

    settings = ConfigManager().load_settings()
    client = HackerOneClient(settings.hackerone)
"""

from typing import List, Literal, Optional

import structlog
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger()

TELEGRAM_MAX_LENGTH = 4096
DISCORD_MAX_LENGTH = 2000
DEFAULT_STATE_PATH = "state/db.json"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    """Treat empty and unsubstituted ${VAR} values as unset."""
    if v is None:
        return None
    # YAML may hand us numeric chat ids
    v = str(v).strip()
    if not v or (v.startswith("${") and v.endswith("}")):
        return None
    return v


class RetryConfig(BaseModel):
    """Retry policy for catalog requests.

    Delay before retry N (1-indexed) is base_delay_seconds * 2^(N-1).
    """

    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay_seconds: float = Field(default=1.0, ge=0.0, le=60.0)


class HackerOneConfig(BaseModel):
    """HackerOne catalog API settings.

    Credentials are optional at this level; the client validates them
    before its first request so that a missing pair fails fast with a
    single message.
    """

    username: Optional[str] = Field(default=None, description="From ${H1_API_USERNAME}")
    token: Optional[str] = Field(default=None, description="From ${H1_API_TOKEN}")
    base_url: str = Field(default="https://api.hackerone.com/v1")
    max_pages: int = Field(
        default=500,
        ge=1,
        description="Ceiling on followed next-page links",
    )
    request_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("username", "token", mode="before")
    @classmethod
    def normalize_credentials(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class TelegramConfig(BaseModel):
    """Telegram bot channel. Configured when both token and chat id are set."""

    bot_token: Optional[str] = Field(default=None, description="From ${TELEGRAM_BOT_TOKEN}")
    chat_id: Optional[str] = Field(default=None, description="From ${TELEGRAM_CHAT_ID}")
    max_length: int = Field(default=TELEGRAM_MAX_LENGTH, ge=100, le=TELEGRAM_MAX_LENGTH)
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    @field_validator("bot_token", "chat_id", mode="before")
    @classmethod
    def normalize_credentials(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)


class DiscordConfig(BaseModel):
    """Discord webhook channel. Configured when the webhook URL is set."""

    webhook_url: Optional[str] = Field(default=None, description="From ${DISCORD_WEBHOOK_URL}")
    username: str = Field(default="h1-watcher", max_length=80)
    max_length: int = Field(default=DISCORD_MAX_LENGTH, ge=100, le=DISCORD_MAX_LENGTH)
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    @field_validator("webhook_url", mode="before")
    @classmethod
    def validate_webhook_url(cls, v: Optional[str]) -> Optional[str]:
        """Blank disables the channel. A URL without an http(s) scheme does too."""
        v = _blank_to_none(v)
        if v is None:
            return None
        if not v.startswith(("https://", "http://")):
            # The URL embeds the webhook secret; never log it
            logger.warning("discord_webhook_invalid", reason="missing_http_scheme")
            return None
        return v

    @property
    def configured(self) -> bool:
        return bool(self.webhook_url)


class ReconConfig(BaseModel):
    """GitHub repository_dispatch trigger for newly discovered programs."""

    enabled: bool = Field(default=False, description="From ${AUTO_RECON}")
    token: Optional[str] = Field(
        default=None, description="From ${GH_PUSH_TOKEN} or ${GITHUB_TOKEN}"
    )
    repository: Optional[str] = Field(
        default=None, description="owner/name, from ${GITHUB_REPOSITORY}"
    )
    event_type: str = Field(default="new-h1-program", min_length=1, max_length=100)
    api_base_url: str = Field(default="https://api.github.com")
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    @field_validator("token", "repository", mode="before")
    @classmethod
    def normalize_target(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("enabled", mode="before")
    @classmethod
    def parse_flag(cls, v: object) -> bool:
        """Accept case-insensitive "true" or "1"; anything else is False."""
        if isinstance(v, bool):
            return v
        if v is None:
            return False
        return str(v).strip().lower() in {"true", "1"}


class WatcherSettings(BaseModel):
    """Complete watcher configuration."""

    hackerone: HackerOneConfig = Field(default_factory=HackerOneConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    recon: ReconConfig = Field(default_factory=ReconConfig)
    state_path: str = Field(default=DEFAULT_STATE_PATH, min_length=1)
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    github_actions: bool = Field(default=False, description="From ${GITHUB_ACTIONS}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return "INFO"
        level = str(v).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            logger.warning("log_level_unknown", value=str(v), fallback="INFO")
            return "INFO"
        return level

    @field_validator("github_actions", mode="before")
    @classmethod
    def parse_github_actions(cls, v: object) -> bool:
        if isinstance(v, bool):
            return v
        return str(v or "").strip().lower() == "true"

    def secret_values(self) -> List[str]:
        """Values that must never appear in log output."""
        candidates = [
            self.hackerone.username,
            self.hackerone.token,
            self.telegram.bot_token,
            self.telegram.chat_id,
            self.discord.webhook_url,
            self.recon.token,
        ]
        return [value for value in candidates if value]
