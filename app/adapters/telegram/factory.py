"""Factory for creating the upstream messenger client."""

import logging

import httpx

from app.adapters.telegram.base import AbstractMessenger
from app.adapters.telegram.bot_api import TelegramBotClient
from app.core.config import TelegramSettings, settings
from app.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_telegram_client(
    telegram_settings: TelegramSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AbstractMessenger:
    """Instantiate the Bot API client from configuration.

    Called per request, after the message passed validation, so a missing
    secret surfaces as a 500 without any network call being attempted.

    Args:
        telegram_settings: Optional settings override; defaults to global settings.
        transport: Optional httpx transport forwarded to the client.

    Returns:
        AbstractMessenger: Configured Telegram client.

    Raises:
        ConfigurationAppError: If the bot token or chat id is not configured.
    """
    cfg = telegram_settings or settings.telegram

    missing = [
        name
        for name, value in (("TELEGRAM_TOKEN", cfg.token), ("TELEGRAM_CHAT_ID", cfg.chat_id))
        if not value
    ]
    if missing:
        logger.error(
            "telegram.not_configured",
            extra={"missing": missing},
        )
        raise ConfigurationAppError(
            code="server_not_configured",
            message="Server not configured",
        )

    return TelegramBotClient(
        token=cfg.token,
        chat_id=cfg.chat_id,
        base_url=cfg.api_base_url,
        timeout_seconds=cfg.timeout_seconds,
        parse_mode=cfg.parse_mode,
        transport=transport,
    )
