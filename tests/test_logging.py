"""
Tests for Logging Configuration

Tests the structlog processors and setup.
"""

import logging

from app.logging_config import add_app_context, filter_sensitive_data, get_logger, setup_logging


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_redacts_sensitive_keys(self):
        event = filter_sensitive_data(None, "info", {"event": "x", "db_password": "hunter2"})

        assert event["db_password"] == "[REDACTED]"
        assert event["event"] == "x"

    def test_strips_password_from_urls(self):
        event = filter_sensitive_data(
            None, "info", {"url": "postgresql+asyncpg://app:hunter2@db:5432/reviews"}
        )

        assert event["url"] == "postgresql+asyncpg://app:[REDACTED]@db:5432/reviews"

    def test_leaves_plain_urls_alone(self):
        event = filter_sensitive_data(None, "info", {"url": "sqlite+aiosqlite:///./reviewers.db"})

        assert event["url"] == "sqlite+aiosqlite:///./reviewers.db"

    def test_redacts_nested(self):
        event = filter_sensitive_data(None, "info", {"ctx": {"api_token": "abc"}})

        assert event["ctx"]["api_token"] == "[REDACTED]"

    def test_app_context(self):
        event = add_app_context(None, "info", {"event": "x"})

        assert event["app"] == "reviewer-service"


class TestSetup:
    """Tests for setup_logging."""

    def test_setup_is_idempotent(self, settings):
        setup_logging(settings)
        setup_logging(settings)

        names = [h.get_name() for h in logging.getLogger().handlers]
        assert names.count("reviewer-service") == 1
        assert logging.getLogger().level == logging.WARNING

    def test_get_logger(self, settings):
        setup_logging(settings)

        logger = get_logger("tests")
        logger.info("Hello", pr_id="pr-1")
