"""Decode Messenger webhook payloads into typed models.

``parse`` accepts the raw POST body (text or bytes) or a mapping that has
already been JSON-decoded, and returns an immutable ``Response`` tree.
Decoding is permissive: unknown keys are dropped, missing keys become
``None`` (scalars and objects) or ``()`` (lists), and scalars of the wrong
type become ``None``. It only fails when the input is not JSON, or when a
node that should be an object or array holds something else.

``to_dict`` and ``to_json`` serialize a ``Response`` back to the wire shape.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import logfire
from pydantic import ValidationError

from src.models.messenger import Response


class MessengerPayloadError(Exception):
    """Base exception for webhook payload errors."""

    pass


class MalformedJsonError(MessengerPayloadError):
    """Raised when a raw payload is not valid UTF-8 JSON."""

    pass


class SchemaMismatchError(MessengerPayloadError):
    """Raised when a JSON node's shape does not fit the webhook schema.

    Attributes:
        location: Dotted path of the first offending node ("" for the root)
        errors: Underlying pydantic error details, one per offending node
    """

    def __init__(
        self,
        message: str,
        *,
        location: str = "",
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message)
        self.location = location
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> SchemaMismatchError:
        """Build from a pydantic ValidationError, keeping the first location."""
        details = exc.errors(include_url=False, include_input=False)
        first = details[0] if details else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        reason = first.get("msg", "invalid value")
        message = f"{location or '<root>'}: {reason}"
        if len(details) > 1:
            message += f" (and {len(details) - 1} more)"
        return cls(message, location=location, errors=details)


class MissingExpectedFieldError(MessengerPayloadError):
    """Raised by strict accessors when an expected object is absent."""

    pass


def _load_json(raw: str | bytes | bytearray) -> Any:
    """JSON-decode raw webhook text, raising MalformedJsonError."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedJsonError(f"Payload is not valid UTF-8: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(f"Payload is not valid JSON: {e}") from e
    except RecursionError as e:
        raise MalformedJsonError("Payload is nested too deeply to decode") from e


def parse(payload: str | bytes | bytearray | Mapping[str, Any]) -> Response:
    """Decode a webhook payload into a ``Response``.

    Args:
        payload: Raw JSON text/bytes, or an already-parsed JSON object

    Returns:
        Typed, immutable Response tree

    Raises:
        MalformedJsonError: Raw input is not valid JSON, or nests too deeply
        SchemaMismatchError: Input is not a JSON object, or a nested node has
            the wrong shape (e.g. a string where a list is expected)
    """
    if isinstance(payload, (str, bytes, bytearray)):
        payload = _load_json(payload)

    if not isinstance(payload, Mapping):
        raise SchemaMismatchError(
            f"<root>: webhook payload must be a JSON object, "
            f"got {type(payload).__name__}"
        )

    try:
        response = Response.model_validate(dict(payload))
    except ValidationError as e:
        raise SchemaMismatchError.from_validation_error(e) from e
    except RecursionError as e:
        raise SchemaMismatchError(
            "<root>: payload is nested too deeply to validate"
        ) from e

    logfire.debug(
        "Webhook payload decoded",
        object=response.object,
        entry_count=len(response.entry),
        event_count=sum(len(entry.messaging) for entry in response.entry),
    )
    return response


def to_dict(response: Response, *, exclude_none: bool = True) -> dict[str, Any]:
    """Serialize a Response to JSON-compatible Python data."""
    return response.model_dump(mode="json", exclude_none=exclude_none)


def to_json(response: Response, *, exclude_none: bool = True) -> str:
    """Serialize a Response to JSON text in the webhook wire shape."""
    return response.model_dump_json(exclude_none=exclude_none)
