"""Tests for request-scoped logging context and level selection."""

import structlog
from ordering.utils.logging import bind_request_context, clear_request_context, log_level


class TestRequestContext:
    def test_binds_given_values(self):
        bind_request_context(method="POST", path="/orders", session_id=None)

        assert structlog.contextvars.get_contextvars() == {"method": "POST", "path": "/orders"}
        clear_request_context()

    def test_rebinding_replaces_previous_request(self):
        bind_request_context(path="/orders")
        bind_request_context(path="/track-order")

        assert structlog.contextvars.get_contextvars() == {"path": "/track-order"}
        clear_request_context()

    def test_clear(self):
        bind_request_context(path="/orders")
        clear_request_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert log_level() == "ERROR"

    def test_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert log_level() == "INFO"

        monkeypatch.setenv("ENVIRONMENT", "test")
        assert log_level() == "WARNING"
