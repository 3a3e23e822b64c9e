"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to testing and clears Telegram secrets before settings are
imported, so no test can reach the real Bot API by accident.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.pop("TELEGRAM_TOKEN", None)
os.environ.pop("TELEGRAM_CHAT_ID", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock

import httpx
import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import TelegramSettings

TEST_TOKEN = "123456:test-token"
TEST_CHAT_ID = "42"


@pytest.fixture
def telegram_settings() -> TelegramSettings:
    """Fully configured Telegram settings pointing at a stubbed API."""
    return TelegramSettings(token=TEST_TOKEN, chat_id=TEST_CHAT_ID)


@pytest.fixture
def clock() -> Mock:
    """Synthetic epoch-milliseconds clock for the rate limiter."""
    return Mock(return_value=1_700_000_000_000)


@pytest.fixture
def rate_limiter(clock: Mock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=6, window_ms=60_000, clock=clock)


class StubTelegramApi:
    """Records sendMessage calls and answers with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: dict | None = {"ok": True, "result": {"message_id": 1}}
        self.raw_content: bytes | None = None
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.raw_content is not None:
            return httpx.Response(self.status_code, content=self.raw_content)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def telegram_api() -> StubTelegramApi:
    return StubTelegramApi()
