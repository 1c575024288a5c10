"""Tests for structured logging setup."""

import io
import json

import structlog

from h1_watcher.observability.context import clear_run_id, run_id_context
from h1_watcher.observability.logging import (
    add_run_id_processor,
    bind_context,
    clear_context,
    configure_logging,
)
from h1_watcher.observability.redaction import REDACTED


class TestAddRunIdProcessor:
    def test_adds_run_id_when_set(self):
        with run_id_context("run-123"):
            result = add_run_id_processor(None, "info", {"event": "test"})

        assert result["run_id"] == "run-123"

    def test_omits_run_id_when_not_set(self):
        clear_run_id()

        result = add_run_id_processor(None, "info", {"event": "test"})

        assert "run_id" not in result


class TestConfigureLogging:
    def setup_method(self):
        self.stream = io.StringIO()

    def teardown_method(self):
        clear_context()
        structlog.reset_defaults()

    def last_entry(self):
        return json.loads(self.stream.getvalue().strip().splitlines()[-1])

    def test_json_output(self):
        configure_logging(level="INFO", json_output=True, stream=self.stream)

        structlog.get_logger().info("hello_world", count=3)

        entry = self.last_entry()
        assert entry["event"] == "hello_world"
        assert entry["count"] == 3
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_without_timestamp(self):
        configure_logging(add_timestamp=False, stream=self.stream)

        structlog.get_logger().info("no_time")

        assert "timestamp" not in self.last_entry()

    def test_level_filtering(self):
        configure_logging(level="WARNING", json_output=True, stream=self.stream)

        structlog.get_logger().info("hidden")
        structlog.get_logger().warning("shown")

        output = self.stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_secrets_are_redacted(self):
        configure_logging(secrets=["s3cret-token"], stream=self.stream)

        structlog.get_logger().error(
            "request_failed",
            url="https://api.example/bots3cret-token/send",
            detail={"token": "s3cret-token"},
        )

        output = self.stream.getvalue()
        assert "s3cret-token" not in output
        assert REDACTED in output

    def test_run_id_is_added(self):
        configure_logging(stream=self.stream)

        with run_id_context("abc"):
            structlog.get_logger().info("inside_run")

        assert self.last_entry()["run_id"] == "abc"

    def test_bound_context_is_merged(self):
        configure_logging(stream=self.stream)
        bind_context(stage="fetch")

        structlog.get_logger().info("with_context")

        assert self.last_entry()["stage"] == "fetch"

    def test_console_output(self):
        configure_logging(level="DEBUG", json_output=False, stream=self.stream)

        structlog.get_logger().debug("console_event")

        assert "console_event" in self.stream.getvalue()
