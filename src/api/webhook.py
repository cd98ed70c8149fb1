"""FastAPI dependency for decoding Facebook Messenger webhooks.

Consumers own their router, verification endpoint and signature checks.
This module only turns the POST body into a typed ``Response``::

    @router.post("/webhook")
    async def handle_webhook(payload: Response = Depends(get_webhook_payload)):
        for text in message_texts(payload):
            ...

Decode errors map onto HTTP errors:
- Body over the configured size limit -> 413
- Malformed JSON -> 400
- Schema mismatch -> 422
"""

import logfire
from fastapi import HTTPException, Request

from src.config import get_settings
from src.models.messenger import Response
from src.services.payload_decoder import (
    MalformedJsonError,
    SchemaMismatchError,
    parse,
)


def _reject_too_large(body_bytes: int, limit_bytes: int) -> HTTPException:
    logfire.warn(
        "Webhook body too large",
        body_bytes=body_bytes,
        limit_bytes=limit_bytes,
    )
    return HTTPException(status_code=413, detail="Webhook body too large")


async def get_webhook_payload(request: Request) -> Response:
    """Read and decode the webhook request body."""
    settings = get_settings()
    limit = settings.max_webhook_body_bytes

    # Refuse declared oversize bodies before reading them
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > limit:
        raise _reject_too_large(int(content_length), limit)

    # Chunked bodies carry no Content-Length
    body = await request.body()
    if len(body) > limit:
        raise _reject_too_large(len(body), limit)

    try:
        return parse(body)
    except MalformedJsonError as e:
        logfire.warn(
            "Rejected malformed webhook body",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SchemaMismatchError as e:
        logfire.warn(
            "Rejected webhook body with unexpected shape",
            location=e.location,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise HTTPException(status_code=422, detail=str(e)) from e
