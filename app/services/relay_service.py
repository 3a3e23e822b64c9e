"""Message relay service: parse, validate, filter, escape and forward.

This service is the core business logic of the relay. It handles:
- Lenient body parsing (malformed JSON degrades to an empty body)
- Message validation (empty / too long)
- Coarse link and mention filtering
- MarkdownV2 escaping and composition
- Delegation to the upstream messenger
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable

import httpx

from app.adapters.telegram.base import AbstractMessenger
from app.adapters.telegram.factory import create_telegram_client
from app.core.config import AppSettings, TelegramSettings, settings
from app.core.errors import ValidationAppError
from app.utils.markdown import bold_markdown_v2, escape_markdown_v2

logger = logging.getLogger(__name__)

# Literal substrings rejected in the lowercased message
BLOCKED_SUBSTRINGS: tuple[str, ...] = (
    "http://",
    "https://",
    "www.",
    "@",
    "telegram.me",
    "t.me",
)

RawBody = Mapping[str, Any] | str | bytes | None

MessengerFactory = Callable[[], AbstractMessenger]

# ECMAScript trim() set: unlike str.strip() it includes U+FEFF and excludes
# the U+001C-U+001F separators and U+0085
TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def message_length(message: str) -> int:
    """Count UTF-16 code units, so astral characters (emoji) count as two."""
    return len(message.encode("utf-16-le")) // 2


def parse_body(raw: RawBody) -> dict[str, Any]:
    """Turn the inbound body into a mapping.

    Structured bodies pass through; text is parsed as JSON; anything absent,
    undecodable or not a JSON object becomes ``{}``.

    Args:
        raw: Pre-parsed mapping, raw text/bytes, or None.

    Returns:
        dict: Parsed body (possibly empty).
    """
    if isinstance(raw, Mapping):
        return dict(raw)

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return {}

    if not raw:
        return {}

    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}

    return parsed if isinstance(parsed, dict) else {}


def extract_message(body: Mapping[str, Any]) -> str:
    """Coerce the ``message`` field to trimmed text (falsy values become "")."""
    value = body.get("message")
    if not value:
        return ""
    return str(value).strip(TRIM_CHARS)


def contains_blocked_content(message: str) -> bool:
    """Return True if the message contains a link-like or mention substring."""
    lowered = message.lower()
    return any(token in lowered for token in BLOCKED_SUBSTRINGS)


def validate_message(message: str, *, max_chars: int) -> str:
    """Validate a trimmed message.

    Args:
        message: Trimmed message text.
        max_chars: Maximum allowed length in UTF-16 code units.

    Returns:
        str: The message, unchanged.

    Raises:
        ValidationAppError: If the message is empty, too long, or contains
            a blocked substring.
    """
    if not message:
        raise ValidationAppError(
            code="message_empty",
            message="Message is empty",
        )

    length = message_length(message)
    if length > max_chars:
        raise ValidationAppError(
            code="message_too_long",
            message=f"Message too long (max {max_chars} chars)",
            details={"max_value": max_chars, "actual_value": length},
        )

    if contains_blocked_content(message):
        raise ValidationAppError(
            code="message_contains_link",
            message="Messages containing links or @ mentions are not allowed",
        )

    return message


def compose_message(message: str, *, header: str = "Anonymous message:") -> str:
    """Build the outbound text: bold header, blank line, escaped message."""
    return f"{bold_markdown_v2(escape_markdown_v2(header))}\n\n{escape_markdown_v2(message)}"


class RelayService:
    """Relays validated anonymous messages to the upstream chat."""

    def __init__(
        self,
        *,
        app_settings: AppSettings | None = None,
        telegram_settings: TelegramSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        messenger_factory: MessengerFactory | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            app_settings: Validation settings; defaults to global settings.
            telegram_settings: Upstream settings; defaults to global settings.
            transport: Optional httpx transport forwarded to the Telegram client.
            messenger_factory: Optional override building the messenger per call.
        """
        self._app_settings = app_settings or settings.app
        self._telegram_settings = telegram_settings or settings.telegram
        self._transport = transport
        self._messenger_factory = messenger_factory or self._default_messenger

    def _default_messenger(self) -> AbstractMessenger:
        return create_telegram_client(self._telegram_settings, transport=self._transport)

    async def relay(self, raw_body: RawBody) -> None:
        """Run the relay pipeline for one request body.

        Args:
            raw_body: Inbound request body.

        Raises:
            ValidationAppError: Empty, too long, or blocked message.
            ConfigurationAppError: Missing bot token or chat id.
            UpstreamTransportAppError: Upstream unreachable.
            UpstreamApplicationAppError: Upstream rejected the message.
        """
        body = parse_body(raw_body)
        message = validate_message(
            extract_message(body),
            max_chars=self._app_settings.max_message_chars,
        )

        # Missing secrets only surface for messages that passed validation
        messenger = self._messenger_factory()

        text = compose_message(message, header=self._app_settings.message_header)
        await messenger.send_message(text)

        logger.info(
            "relay.sent",
            extra={"char_count": message_length(message)},
        )
