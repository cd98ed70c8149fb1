"""Flatten a decoded webhook ``Response`` into simple lists.

``messaging_events`` walks entries in order, then each entry's messaging
items in order. Every other accessor is built on it, so results follow the
order the platform delivered the events in.

By default items that lack the object an accessor reads (a postback has no
``message``, for example) are skipped. Pass ``strict=True`` to treat that as
a caller error and raise ``MissingExpectedFieldError`` instead.
"""

import logging

from src.logging_config import mask_pii
from src.models.messenger import Attachment, Message, Messaging, Response
from src.services.payload_decoder import MissingExpectedFieldError

logger = logging.getLogger(__name__)


def messaging_events(response: Response) -> list[Messaging]:
    """Return every messaging item across all entries."""
    return [event for entry in response.entry for event in entry.messaging]


def _message_events(response: Response, strict: bool) -> list[Message]:
    """Collect the Message of every messaging item that has one."""
    messages: list[Message] = []
    for index, event in enumerate(messaging_events(response)):
        if event.message is not None:
            messages.append(event.message)
            continue
        if strict:
            raise MissingExpectedFieldError(
                f"messaging event {index} has no message "
                f"(event kind: {event.kind.value})"
            )
        logger.debug(
            "Skipping %s event from %s: no message",
            event.kind.value,
            mask_pii(event.sender.id if event.sender else None),
        )
    return messages


def message_texts(response: Response, *, strict: bool = False) -> list[str]:
    """Return the text of every message event.

    Messages without text (attachment-only messages) contribute nothing.

    Raises:
        MissingExpectedFieldError: ``strict`` is set and an item has no message
    """
    return [
        message.text
        for message in _message_events(response, strict)
        if message.text is not None
    ]


def message_attachments(
    response: Response, *, strict: bool = False
) -> list[Attachment]:
    """Return every attachment of every message event, in delivery order.

    Raises:
        MissingExpectedFieldError: ``strict`` is set and an item has no message
    """
    return [
        attachment
        for message in _message_events(response, strict)
        for attachment in message.attachments
    ]


def message_senders(response: Response, *, strict: bool = False) -> list[str]:
    """Return the sender id (PSID) of every messaging item.

    Raises:
        MissingExpectedFieldError: ``strict`` is set and an item has no sender
    """
    senders: list[str] = []
    for index, event in enumerate(messaging_events(response)):
        if event.sender is None:
            if strict:
                raise MissingExpectedFieldError(
                    f"messaging event {index} has no sender"
                )
            logger.debug("Skipping %s event: no sender", event.kind.value)
            continue
        if event.sender.id is not None:
            senders.append(event.sender.id)
    return senders
