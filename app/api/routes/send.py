from fastapi import APIRouter, Depends, Request

from app.core.rate_limit import enforce_rate_limit
from app.schemas.message import ErrorResponse, SendMessageRequest, SendMessageResponse
from app.services.relay_service import RelayService

router = APIRouter(tags=["Messages"])

_error_responses = {
    status: {"model": ErrorResponse}
    for status in (400, 405, 429, 500, 502)
}


@router.post(
    "/send",
    response_model=SendMessageResponse,
    responses=_error_responses,
    dependencies=[Depends(enforce_rate_limit)],
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": SendMessageRequest.model_json_schema(),
                }
            },
        }
    },
)
async def send_message(request: Request) -> SendMessageResponse:
    """Relay an anonymous message to the configured Telegram chat.

    The body is read raw so malformed JSON is reported as an empty message
    rather than a schema error.

    Args:
        request: Incoming request; the relay service lives on ``app.state``.

    Returns:
        SendMessageResponse: ``{"ok": true}`` once Telegram accepted the message.

    Raises:
        AppError: Any pipeline failure, rendered by the global handlers.
    """
    relay_service: RelayService = request.app.state.relay_service
    raw_body = await request.body()
    await relay_service.relay(raw_body)
    return SendMessageResponse(ok=True)
