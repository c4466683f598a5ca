"""Relayed message models — a closed union discriminated by ``type``.

Every message shares the identity, sender and source fields of
``MessageBase``; the payload fields depend on the variant.  Adaptors build
these either directly or from decoded wire data through ``parse_message``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializeAsAny,
    TypeAdapter,
    model_validator,
)

from syncrelay.content import Content
from syncrelay.models.system import SYSTEM_PAYLOAD_MAP, SystemPayload, SystemType


class MessageType(str, Enum):
    """The four message variants."""

    TEXT = "text"
    MEDIA = "media"
    LOCATION = "location"
    SYSTEM = "system"


class MediaKind(str, Enum):
    STICKER = "sticker"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"


class User(BaseModel):
    """A person on the originating platform."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    username: str | None = None
    avatar_url: str | None = None


SenderRole = Literal["system", "bot", "unknown"]


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class _SourceBase(BaseModel):
    # Adaptors may attach platform-specific identifiers to any source.
    model_config = ConfigDict(extra="allow")


class PrivateSource(_SourceBase):
    type: Literal["private"] = "private"


class GroupSource(_SourceBase):
    type: Literal["group"] = "group"
    group_id: str
    group_name: str | None = None


class ChannelSource(_SourceBase):
    type: Literal["channel"] = "channel"
    channel_id: str
    channel_name: str | None = None


class ForumSource(_SourceBase):
    type: Literal["forum"] = "forum"
    forum_id: str
    thread_id: str | None = None


Source = Annotated[
    Union[PrivateSource, GroupSource, ChannelSource, ForumSource],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class MessageBase(BaseModel):
    """Fields shared by every message variant.

    Messages are deliberately mutable: interceptors may enrich ``extra`` or
    rewrite payloads before fan-out.  Identity fields (``id``, ``timestamp``,
    ``sender``, ``source``) are left alone by convention.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sender: User | SenderRole = "unknown"
    source: Source = Field(default_factory=PrivateSource)
    alt: Content | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class TextMessage(MessageBase):
    type: Literal["text"] = "text"
    content: Content
    mentions: list[User] = []


class MediaItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MediaKind
    url: str


class MediaMessage(MessageBase):
    type: Literal["media"] = "media"
    contents: list[MediaItem] = Field(min_length=1)
    size: int | None = Field(default=None, ge=0)  # bytes
    caption: Content | None = None
    mentions: list[User] = []


class LocationMessage(MessageBase):
    type: Literal["location"] = "location"
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None
    accuracy: float | None = Field(default=None, ge=0)


class SystemMessage(MessageBase):
    """A chat event; ``payload`` must match the model for ``system_type``."""

    type: Literal["system"] = "system"
    system_type: SystemType
    payload: SerializeAsAny[SystemPayload]

    @model_validator(mode="before")
    @classmethod
    def _coerce_payload(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        payload = data.get("payload")
        system_type = data.get("system_type")
        if system_type is None or payload is None:
            return data
        payload_cls = SYSTEM_PAYLOAD_MAP[SystemType(system_type)]
        if isinstance(payload, payload_cls):
            return data
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        return {**data, "payload": payload_cls.model_validate(payload)}

    @model_validator(mode="after")
    def _check_payload(self) -> SystemMessage:
        expected = SYSTEM_PAYLOAD_MAP[self.system_type]
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"system_type {self.system_type.value!r} requires a "
                f"{expected.__name__} payload, got {type(self.payload).__name__}"
            )
        return self


Message = Annotated[
    Union[TextMessage, MediaMessage, LocationMessage, SystemMessage],
    Field(discriminator="type"),
]

# Payloads reference User and Message, which only exist once this module
# has been executed.
for _payload_cls in set(SYSTEM_PAYLOAD_MAP.values()):
    _payload_cls.model_rebuild()
del _payload_cls

MESSAGE_TYPE_MAP: dict[MessageType, type[MessageBase]] = {
    MessageType.TEXT: TextMessage,
    MessageType.MEDIA: MediaMessage,
    MessageType.LOCATION: LocationMessage,
    MessageType.SYSTEM: SystemMessage,
}

_MESSAGE_ADAPTER: TypeAdapter[Message] = TypeAdapter(Message)


def parse_message(data: Mapping[str, Any] | str | bytes) -> MessageBase:
    """Validate decoded wire data (or a JSON document) into a message variant.

    Raises
    ------
    pydantic.ValidationError
        If the data does not describe exactly one consistent variant.
    """
    if isinstance(data, (str, bytes)):
        return _MESSAGE_ADAPTER.validate_json(data)
    return _MESSAGE_ADAPTER.validate_python(data)
