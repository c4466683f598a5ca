"""Send resolution — pick the publisher capability for a message variant.

| variant   | capability                                  |
|-----------|---------------------------------------------|
| text      | ``send_text``                               |
| media     | ``send_media`` (``MediaPublisher``)         |
| location  | ``send_location`` (``LocationPublisher``)   |
| system    | ``send_system`` (``SystemPublisher``)       |

When the publisher lacks the capability, the message's ``alt`` content is
sent as a synthesized text message.  Without ``alt`` the send reports
``False``; a missing capability is not an error.
"""

from __future__ import annotations

import logging

from syncrelay.adaptors import (
    LocationPublisher,
    MediaPublisher,
    PublishableAdaptor,
    SystemPublisher,
)
from syncrelay.models import (
    LocationMessage,
    MediaMessage,
    MessageBase,
    SystemMessage,
    TextMessage,
)

logger = logging.getLogger(__name__)


def build_alt_message(message: MessageBase) -> TextMessage | None:
    """Return a text stand-in for *message* built from its ``alt`` content.

    Identity, sender, source and extension metadata are carried over.
    """
    if message.alt is None:
        return None
    return TextMessage(
        id=message.id,
        timestamp=message.timestamp,
        sender=message.sender,
        source=message.source,
        extra=dict(message.extra),
        content=message.alt,
    )


async def send_message(publisher: PublishableAdaptor, message: MessageBase) -> bool:
    """Deliver *message* through the best capability *publisher* offers.

    Exceptions raised by the publisher propagate to the caller.

    Raises
    ------
    TypeError
        If *message* is not one of the known variants.
    """
    if isinstance(message, TextMessage):
        return await publisher.send_text(message)
    if isinstance(message, MediaMessage):
        if isinstance(publisher, MediaPublisher):
            return await publisher.send_media(message)
    elif isinstance(message, LocationMessage):
        if isinstance(publisher, LocationPublisher):
            return await publisher.send_location(message)
    elif isinstance(message, SystemMessage):
        if isinstance(publisher, SystemPublisher):
            return await publisher.send_system(message)
    else:
        raise TypeError(f"Unsupported message variant: {type(message).__name__}")

    alt_message = build_alt_message(message)
    if alt_message is None:
        logger.info(
            "Publisher %s cannot send %s message %s and it has no alt content",
            publisher.id,
            message.type,
            message.id,
        )
        return False

    logger.debug(
        "Publisher %s lacks a %s capability; sending alt text for %s",
        publisher.id,
        message.type,
        message.id,
    )
    return await publisher.send_text(alt_message)
