"""Unit tests for watcher configuration models."""

import pytest
from pydantic import ValidationError
from structlog.testing import capture_logs

from h1_watcher.models.config import (
    DiscordConfig,
    HackerOneConfig,
    ReconConfig,
    RetryConfig,
    TelegramConfig,
    WatcherSettings,
)


class TestHackerOneConfig:
    def test_defaults(self):
        config = HackerOneConfig()

        assert config.username is None
        assert config.base_url == "https://api.hackerone.com/v1"
        assert config.max_pages == 500
        assert config.retry == RetryConfig(max_attempts=3, base_delay_seconds=1.0)

    def test_blank_and_unsubstituted_credentials_are_unset(self):
        config = HackerOneConfig(username="  ", token="${H1_API_TOKEN}")

        assert config.username is None
        assert config.token is None

    def test_max_pages_must_be_positive(self):
        with pytest.raises(ValidationError):
            HackerOneConfig(max_pages=0)


class TestTelegramConfig:
    def test_configured_needs_token_and_chat(self):
        assert TelegramConfig(bot_token="t").configured is False
        assert TelegramConfig(bot_token="t", chat_id="c").configured is True

    def test_numeric_chat_id_is_accepted(self):
        config = TelegramConfig(bot_token="t", chat_id=-100123)
        assert config.chat_id == "-100123"

    def test_max_length_capped_at_platform_limit(self):
        with pytest.raises(ValidationError):
            TelegramConfig(max_length=5000)


class TestDiscordConfig:
    def test_empty_url_disables_channel(self):
        assert DiscordConfig(webhook_url="").configured is False

    @pytest.mark.parametrize(
        "url", ["ftp://example.com/hook", "discord.com/api/webhooks/1/x"]
    )
    def test_url_without_http_scheme_disables_channel(self, url):
        with capture_logs() as logs:
            config = DiscordConfig(webhook_url=url)

        assert config.webhook_url is None
        assert config.configured is False
        assert logs[0]["event"] == "discord_webhook_invalid"
        assert url not in str(logs)

    def test_default_username(self):
        assert DiscordConfig().username == "h1-watcher"


class TestReconConfig:
    @pytest.mark.parametrize("value", ["true", "TRUE", "True", "1", " true "])
    def test_enabled_values(self, value):
        assert ReconConfig(enabled=value).enabled is True

    @pytest.mark.parametrize("value", ["false", "0", "yes", "", None])
    def test_disabled_values(self, value):
        assert ReconConfig(enabled=value).enabled is False


class TestWatcherSettings:
    def test_log_level_normalized(self):
        assert WatcherSettings(log_level="warn").log_level == "WARNING"
        assert WatcherSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["verbose", "trace"])
    def test_unknown_log_level_falls_back_to_info(self, value):
        with capture_logs() as logs:
            settings = WatcherSettings(log_level=value)

        assert settings.log_level == "INFO"
        assert logs[0]["event"] == "log_level_unknown"
        assert logs[0]["value"] == value

    def test_secret_values_skip_unset(self):
        settings = WatcherSettings(
            hackerone=HackerOneConfig(username="hacker", token="tok"),
            discord=DiscordConfig(webhook_url="https://discord.example/hook"),
        )

        assert settings.secret_values() == ["hacker", "tok", "https://discord.example/hook"]
