"""Messenger adapter layer - abstracts over the upstream chat API."""

from app.adapters.telegram.base import AbstractMessenger
from app.adapters.telegram.bot_api import TelegramBotClient
from app.adapters.telegram.factory import create_telegram_client

__all__ = [
    "AbstractMessenger",
    "TelegramBotClient",
    "create_telegram_client",
]
