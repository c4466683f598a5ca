"""syncrelay data models — pydantic v2 message variants and system payloads."""

from syncrelay.models.messages import (
    MESSAGE_TYPE_MAP,
    ChannelSource,
    ForumSource,
    GroupSource,
    LocationMessage,
    MediaItem,
    MediaKind,
    MediaMessage,
    Message,
    MessageBase,
    MessageType,
    PrivateSource,
    Source,
    SystemMessage,
    TextMessage,
    User,
    parse_message,
)
from syncrelay.models.system import SYSTEM_PAYLOAD_MAP, SystemPayload, SystemType

__all__ = [
    # messages
    "MessageType",
    "MessageBase",
    "Message",
    "TextMessage",
    "MediaMessage",
    "MediaItem",
    "MediaKind",
    "LocationMessage",
    "SystemMessage",
    "MESSAGE_TYPE_MAP",
    "parse_message",
    # senders and sources
    "User",
    "Source",
    "PrivateSource",
    "GroupSource",
    "ChannelSource",
    "ForumSource",
    # system events
    "SystemType",
    "SystemPayload",
    "SYSTEM_PAYLOAD_MAP",
]
