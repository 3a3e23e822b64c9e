"""Telegram Bot API client adapter."""

import logging
from typing import Any

import httpx

from app.adapters.telegram.base import AbstractMessenger
from app.core.errors import UpstreamApplicationAppError, UpstreamTransportAppError
from app.core.logging import fingerprint, redact_bot_tokens

logger = logging.getLogger(__name__)


class TelegramBotClient(AbstractMessenger):
    """Client for the Bot API ``sendMessage`` method.

    A fresh ``httpx.AsyncClient`` is opened per call, so nothing outlives the
    request that triggered it.
    """

    def __init__(
        self,
        token: str,
        chat_id: str,
        base_url: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
        parse_mode: str = "MarkdownV2",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Bot API client.

        Args:
            token: Bot token; embedded in the endpoint path.
            chat_id: Target chat identifier.
            base_url: Bot API base URL.
            timeout_seconds: Timeout for the HTTP round trip.
            parse_mode: Telegram parse mode for the text.
            transport: Optional httpx transport (used by tests to stub the API).
        """
        self._token = token
        self.chat_id = chat_id
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.parse_mode = parse_mode
        self._transport = transport

    @property
    def send_message_url(self) -> str:
        return f"{self.base_url}/bot{self._token}/sendMessage"

    def _build_payload(self, text: str) -> dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": self.parse_mode,
        }

    async def send_message(self, text: str) -> None:
        """Send text to the configured chat.

        Args:
            text: MarkdownV2-escaped message body.

        Raises:
            UpstreamTransportAppError: Network failure or undecodable response.
            UpstreamApplicationAppError: Non-2xx status or ``"ok": false``.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.send_message_url,
                    json=self._build_payload(text),
                )
        except httpx.HTTPError as exc:
            logger.error(
                "telegram.transport_error",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": redact_bot_tokens(str(exc)),
                },
            )
            raise UpstreamTransportAppError(
                code="send_failed",
                message="Failed to send message",
            ) from exc

        data = self._decode(response)

        if not response.is_success or data.get("ok") is False:
            logger.error(
                "telegram.api_error",
                extra={
                    "status_code": response.status_code,
                    "error_code": data.get("error_code"),
                    "description": data.get("description"),
                    "chat_hash": fingerprint(str(self.chat_id)),
                },
            )
            raise UpstreamApplicationAppError(
                code="upstream_error",
                message="Telegram API error",
                details={"http_status": response.status_code},
            )

        logger.info(
            "telegram.message_sent",
            extra={
                "status_code": response.status_code,
                "chat_hash": fingerprint(str(self.chat_id)),
            },
        )

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        """Parse the API response body.

        A non-2xx body that isn't JSON still counts as an API error, so it
        decodes to an empty dict. A 2xx body that isn't JSON is a broken
        exchange and is reported like a transport failure.
        """
        try:
            data = response.json()
        except ValueError as exc:
            if not response.is_success:
                return {}
            logger.error(
                "telegram.invalid_response",
                extra={"status_code": response.status_code},
            )
            raise UpstreamTransportAppError(
                code="send_failed",
                message="Failed to send message",
            ) from exc

        return data if isinstance(data, dict) else {}
