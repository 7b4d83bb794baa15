"""Unit tests for structured logging.

Tests that logs are configured correctly and sensitive data is filtered.
"""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from uptime_engine.infrastructure.observability.logging import (
    _add_trace_context,
    _filter_sensitive_data,
    _stringify_identifiers,
    configure_logging,
    get_logger,
    mask_url,
)


class TestStructuredLogging:
    """Tests for structured logging configuration."""

    def test_configure_and_log_does_not_raise(self, caplog):
        configure_logging()
        logger = get_logger(__name__)

        with caplog.at_level(logging.INFO):
            logger.info("service_status_changed", service_id="123", new_status="degraded")

        assert len(caplog.records) > 0

    def test_console_renderer_when_json_disabled(self, monkeypatch):
        monkeypatch.setenv("OTEL_LOG_JSON_FORMAT", "false")

        configure_logging()

        get_logger(__name__).info("console_event")

    def test_sensitive_data_is_masked(self):
        event_dict = {
            "event": "Connecting",
            "service_id": "123",
            "password": "my_password",
            "database_url": "postgresql://user:pw@db/uptime",
        }

        filtered = _filter_sensitive_data(None, "info", event_dict)

        assert filtered["password"] == "my_p*******"
        assert filtered["database_url"].startswith("post")
        assert "pw@db" not in filtered["database_url"]
        assert filtered["service_id"] == "123"
        assert filtered["event"] == "Connecting"

    def test_short_and_non_string_secrets_are_redacted(self):
        filtered = _filter_sensitive_data(None, "info", {"token": "abc", "secret": 1234})

        assert filtered["token"] == "***REDACTED***"
        assert filtered["secret"] == "***REDACTED***"

    def test_nested_dicts_are_filtered(self):
        event_dict = {"event": "config", "redis": {"redis_url": "redis://:hunter2@cache"}}

        filtered = _filter_sensitive_data(None, "info", event_dict)

        assert "hunter2" not in filtered["redis"]["redis_url"]

    def test_no_trace_context_outside_a_span(self):
        event_dict = _add_trace_context(None, "info", {"event": "x"})

        assert "trace_id" not in event_dict
        assert "span_id" not in event_dict

    def test_url_keeps_host_and_user_but_not_password(self):
        filtered = _filter_sensitive_data(
            None,
            "info",
            {"database_url": "postgresql+asyncpg://uptime:s3cret@db:5432/uptime"},
        )

        assert filtered["database_url"] == "postgresql+asyncpg://uptime:***@db:5432/uptime"

    def test_url_without_credentials_is_unchanged(self):
        assert mask_url("redis://localhost:6379/0") == "redis://localhost:6379/0"

    def test_identifiers_are_rendered_as_strings(self):
        service_id = uuid4()
        changed_at = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

        event_dict = _stringify_identifiers(
            None, "info", {"service_id": service_id, "changed_at": changed_at, "count": 3}
        )

        assert event_dict == {
            "service_id": str(service_id),
            "changed_at": "2024-03-01T12:00:00+00:00",
            "count": 3,
        }

    def test_scheduler_logger_is_quieted(self):
        configure_logging()

        assert logging.getLogger("apscheduler").level >= logging.WARNING
