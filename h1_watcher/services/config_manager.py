import os
from pathlib import Path
from string import Template
from typing import Any, Dict, Mapping, Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from h1_watcher.models.config import WatcherSettings
from h1_watcher.utils.exceptions import ConfigValidationError

logger = structlog.get_logger()


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset values so model defaults apply."""
    pruned: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            nested = _prune(value)
            if nested:
                pruned[key] = nested
        elif value is not None and value != "":
            pruned[key] = value
    return pruned


def _deep_merge(base: Dict[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Builds the WatcherSettings value object once at process start.

    Sources, lowest precedence first:
    1. Environment variables (a ``.env`` file is loaded first when present)
    2. Optional YAML config file, with ``${VAR}`` substitution from the env
    3. Explicit overrides (CLI options)
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config_path = Path(config_path) if config_path else None
        self._environ = environ
        self.env_loaded = environ is not None

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    def load_settings(self, overrides: Optional[Dict[str, Any]] = None) -> WatcherSettings:
        """Load and validate settings"""
        # 1. Load environment
        if not self.env_loaded:  # pragma: no cover
            load_dotenv()
            self.env_loaded = True

        config_data = self._from_environment()

        # 2. Overlay config file
        if self.config_path is not None:
            config_data = _deep_merge(config_data, self._read_config_file())

        # 3. Apply explicit overrides
        if overrides:
            config_data = _deep_merge(config_data, _prune(overrides))

        # 4. Validate with Pydantic
        try:
            settings = WatcherSettings(**config_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        logger.info(
            "config_loaded",
            state_path=settings.state_path,
            telegram=settings.telegram.configured,
            discord=settings.discord.configured,
            recon=settings.recon.enabled,
        )
        return settings

    def _from_environment(self) -> Dict[str, Any]:
        env = self.environ
        return _prune(
            {
                "hackerone": {
                    "username": env.get("H1_API_USERNAME"),
                    "token": env.get("H1_API_TOKEN"),
                },
                "telegram": {
                    "bot_token": env.get("TELEGRAM_BOT_TOKEN"),
                    "chat_id": env.get("TELEGRAM_CHAT_ID"),
                },
                "discord": {"webhook_url": env.get("DISCORD_WEBHOOK_URL")},
                "recon": {
                    "enabled": env.get("AUTO_RECON"),
                    "token": env.get("GH_PUSH_TOKEN") or env.get("GITHUB_TOKEN"),
                    "repository": env.get("GITHUB_REPOSITORY"),
                },
                "state_path": env.get("DB_PATH"),
                "log_level": env.get("LOG_LEVEL"),
                "log_format": (env.get("LOG_FORMAT") or "").strip().lower() or None,
                "github_actions": env.get("GITHUB_ACTIONS"),
            }
        )

    def _read_config_file(self) -> Dict[str, Any]:
        assert self.config_path is not None

        if not self.config_path.exists():
            raise ConfigValidationError(f"Configuration file not found: {self.config_path}")

        try:
            raw_content = self.config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        # Substitute env vars; safe_substitute leaves unknown ${VAR} untouched
        try:
            substituted = Template(raw_content).safe_substitute(self.environ)
            data = yaml.safe_load(substituted)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Failed to parse YAML config: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Config file must contain a mapping, got {type(data).__name__}"
            )
        return data
