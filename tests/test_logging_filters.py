"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    SENSITIVE_KEYS_DEFAULT,
    JsonFormatter,
    SensitiveDataFilter,
    fingerprint,
    redact_bot_tokens,
)


@pytest.fixture
def capture():
    """Attach a JSON handler with redaction to a throwaway logger."""

    def _make(name: str) -> tuple[logging.Logger, StringIO]:
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.handlers.clear()
        logger.propagate = False

        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(SensitiveDataFilter())
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        return logger, stream

    return _make


def test_sensitive_filter_redacts_bot_secrets(capture):
    """Ensure token and chat id fields are redacted."""

    logger, stream = capture("test_secret_redaction")

    logger.info(
        "telegram.configured",
        extra={
            "token": "123456:AAH-secret",
            "chat_id": "-100987654",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "AAH-secret" not in output
    assert "-100987654" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_message_text(capture):
    """Ensure anonymous message content never reaches the logs."""

    logger, stream = capture("test_message_redaction")

    logger.info(
        "relay.debug",
        extra={
            "message_text": "my secret confession",
            "text": "*Anonymous message:*\n\nmy secret confession",
            "char_count": 20,
        },
    )

    output = stream.getvalue()

    assert "confession" not in output
    assert "char_count" in output
    assert "message_text" in SENSITIVE_KEYS_DEFAULT


def test_sensitive_filter_allows_safe_fields(capture):
    """Verify safe fields pass through unmodified."""

    logger, stream = capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "request_path": "/api/send",
            "status_code": 200,
            "duration_ms": 150.5,
        },
    )

    output = stream.getvalue()

    assert "req-123" in output
    assert "/api/send" in output
    assert "200" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts(capture):
    """Ensure nested sensitive fields are redacted."""

    logger, stream = capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "authorization": "Bearer abc",
                "x-forwarded-for": "203.0.113.7",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()

    assert "Bearer abc" not in output
    assert "203.0.113.7" not in output
    assert "pytest" in output


def test_bot_token_in_log_message_is_masked(capture):
    """Ensure tokens embedded in URLs inside the message are masked."""

    logger, stream = capture("test_url_masking")

    logger.warning(
        "request failed: %s",
        "https://api.telegram.org/bot123456:AAH-secret_x/sendMessage",
    )

    record = json.loads(stream.getvalue())
    assert "AAH-secret" not in record["message"]
    assert "bot[REDACTED]/sendMessage" in record["message"]


def test_redact_bot_tokens_leaves_other_text_alone():
    assert redact_bot_tokens("no tokens here") == "no tokens here"
    assert redact_bot_tokens("/bot1:abc/getMe") == "/bot[REDACTED]/getMe"


def test_fingerprint_is_stable_and_short():
    assert fingerprint("ip:203.0.113.7") == fingerprint("ip:203.0.113.7")
    assert fingerprint("ip:203.0.113.7") != fingerprint("ip:203.0.113.8")
    assert len(fingerprint("anything")) == 16
