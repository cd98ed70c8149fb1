"""Incoming Facebook Messenger webhook models.

The models mirror the webhook payload the platform POSTs to a Page
subscription. Every field is optional because the platform only sends the
fields relevant to each event type.

Decoding is permissive:
- List fields always decode to a tuple, even when the key is missing or ``null``.
- A scalar field holding a value of the wrong type (``"seq": "abc"``) decodes
  to ``None``. Only object/array shape errors fail validation.

Models are immutable and hashable, so a decoded tree can be shared freely.
"""

from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)

from src.constants import MESSAGING_EVENT_FIELDS


def _none_as_empty(value: Any) -> Any:
    """Treat an explicit ``null`` list as an empty one."""
    return () if value is None else value


def _none_if_invalid(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    """Decode a scalar of the wrong type to None instead of failing."""
    try:
        return handler(value)
    except ValidationError:
        return None


def _freeze(value: Any) -> Any:
    """Hashable equivalent of an opaque JSON value."""
    if isinstance(value, dict):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


OptionalStr = Annotated[str | None, WrapValidator(_none_if_invalid)]
OptionalInt = Annotated[int | None, WrapValidator(_none_if_invalid)]


class MessengerModel(BaseModel):
    """Base for all webhook models: immutable, hashable, unknown keys dropped."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        # Ids are opaque strings, but some payloads send them as numbers
        coerce_numbers_to_str=True,
    )

    def __hash__(self) -> int:
        # Opaque mappings (nlp, payload) are plain dicts
        return hash(
            (type(self),)
            + tuple(_freeze(getattr(self, name)) for name in type(self).model_fields)
        )


class MessagingKind(str, Enum):
    """Which event a messaging item carries."""

    MESSAGE = "message"
    OPTIN = "optin"
    POSTBACK = "postback"
    ACCOUNT_LINKING = "account_linking"
    REFERRAL = "referral"
    UNKNOWN = "unknown"


class User(MessengerModel):
    """Sender or recipient of a messaging event."""

    id: OptionalStr = None


class Referral(MessengerModel):
    """Referral info (m.me links, ads, chat plugin)."""

    ref: OptionalStr = None
    source: OptionalStr = None
    type: OptionalStr = None


class Attachment(MessengerModel):
    """Messenger attachment (image, audio, video, file, location, fallback)."""

    type: OptionalStr = None
    title: OptionalStr = None
    payload: dict[str, Any] | None = None
    url: OptionalStr = None


class QuickReply(MessengerModel):
    """Quick reply, either offered (``quick_replies``) or tapped (``quick_reply``).

    ``payload`` is kept as whatever JSON value the platform sent.
    """

    content_type: OptionalStr = None
    title: OptionalStr = None
    payload: Any = None


class Message(MessengerModel):
    """Message event payload."""

    mid: OptionalStr = None
    seq: OptionalInt = None
    text: OptionalStr = None
    nlp: dict[str, Any] | None = None
    attachments: Annotated[
        tuple[Attachment, ...], BeforeValidator(_none_as_empty)
    ] = Field(default_factory=tuple)
    quick_replies: Annotated[
        tuple[QuickReply, ...], BeforeValidator(_none_as_empty)
    ] = Field(default_factory=tuple)
    quick_reply: QuickReply | None = None


class Optin(MessengerModel):
    """Plugin opt-in event payload."""

    ref: OptionalStr = None


class Postback(MessengerModel):
    """Postback button event payload."""

    title: OptionalStr = None
    payload: OptionalStr = None
    referral: Referral | None = None


class AccountLinking(MessengerModel):
    """Account linking event payload."""

    authorization_code: OptionalStr = None
    status: OptionalStr = None


class Messaging(MessengerModel):
    """One event within an entry.

    The platform sends at most one of ``message``, ``optin``, ``postback``,
    ``account_linking`` and ``referral``. ``kind`` and ``event`` expose that
    as a single variant.
    """

    sender: User | None = None
    recipient: User | None = None
    timestamp: OptionalInt = None
    message: Message | None = None
    optin: Optin | None = None
    postback: Postback | None = None
    account_linking: AccountLinking | None = None
    referral: Referral | None = None

    @property
    def kind(self) -> MessagingKind:
        """Variant of the first event payload present, or UNKNOWN."""
        for field_name in MESSAGING_EVENT_FIELDS:
            if getattr(self, field_name) is not None:
                return MessagingKind(field_name)
        return MessagingKind.UNKNOWN

    @property
    def event(self) -> Message | Optin | Postback | AccountLinking | Referral | None:
        """Payload object matching ``kind`` (None for UNKNOWN)."""
        kind = self.kind
        if kind is MessagingKind.UNKNOWN:
            return None
        return getattr(self, kind.value)


class Entry(MessengerModel):
    """Facebook webhook entry."""

    id: OptionalStr = None
    time: OptionalInt = None
    messaging: Annotated[
        tuple[Messaging, ...], BeforeValidator(_none_as_empty)
    ] = Field(default_factory=tuple)


class Response(MessengerModel):
    """Facebook Messenger webhook payload."""

    object: OptionalStr = None
    entry: Annotated[
        tuple[Entry, ...], BeforeValidator(_none_as_empty)
    ] = Field(default_factory=tuple)
