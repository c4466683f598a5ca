"""System event kinds and the payload model each one carries."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from syncrelay.models.messages import Message, User


class SystemType(str, Enum):
    """Closed set of chat events relayed as system messages."""

    USER_JOINED = "user_joined"
    USER_LEFT = "user_left"
    USER_BANNED = "user_banned"
    USER_UNBANNED = "user_unbanned"
    SOURCE_NAME_CHANGED = "source_name_changed"
    SOURCE_TOPIC_CHANGED = "source_topic_changed"
    SOURCE_AVATAR_CHANGED = "source_avatar_changed"
    MESSAGE_PINNED = "message_pinned"
    MESSAGE_UNPINNED = "message_unpinned"
    MESSAGE_REDACTED = "message_redacted"
    MESSAGE_EDITED = "message_edited"
    REPLY = "reply"
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    CALL_STARTED = "call_started"
    CALL_ENDED = "call_ended"
    BOOST_ADDED = "boost_added"
    THREAD_CREATED = "thread_created"
    INVITE_SENT = "invite_sent"
    UNKNOWN = "unknown"


class SystemPayload(BaseModel):
    """Base for every system payload.  Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class UserPayload(SystemPayload):
    user: User


class UserBannedPayload(SystemPayload):
    user: User
    reason: str | None = None


class RenamePayload(SystemPayload):
    old_name: str
    new_name: str


class TopicChangePayload(SystemPayload):
    old_topic: str
    new_topic: str


class AvatarChangePayload(SystemPayload):
    old_avatar_url: str | None = None
    new_avatar_url: str


class MessageRefPayload(SystemPayload):
    """Carries the full message being pinned, unpinned or replied to."""

    message: Message


class RedactionPayload(SystemPayload):
    message_id: str
    reason: str | None = None


class EditPayload(SystemPayload):
    message_id: str
    old_content: str
    new_content: str


class ReactionPayload(SystemPayload):
    message_id: str
    reaction: str


class CallStartedPayload(SystemPayload):
    call_id: str
    participants: list[User] = []


class CallEndedPayload(SystemPayload):
    call_id: str
    duration_ms: int = Field(ge=0)


class BoostPayload(SystemPayload):
    user: User
    level: int


class ThreadCreatedPayload(SystemPayload):
    thread_id: str
    creator: User
    parent_id: str


class InvitePayload(SystemPayload):
    inviter: User
    invitee: User
    source_id: str


class UnknownPayload(SystemPayload):
    raw: Any = None


# Which payload model a given system_type must carry.
SYSTEM_PAYLOAD_MAP: dict[SystemType, type[SystemPayload]] = {
    SystemType.USER_JOINED: UserPayload,
    SystemType.USER_LEFT: UserPayload,
    SystemType.USER_BANNED: UserBannedPayload,
    SystemType.USER_UNBANNED: UserPayload,
    SystemType.SOURCE_NAME_CHANGED: RenamePayload,
    SystemType.SOURCE_TOPIC_CHANGED: TopicChangePayload,
    SystemType.SOURCE_AVATAR_CHANGED: AvatarChangePayload,
    SystemType.MESSAGE_PINNED: MessageRefPayload,
    SystemType.MESSAGE_UNPINNED: MessageRefPayload,
    SystemType.MESSAGE_REDACTED: RedactionPayload,
    SystemType.MESSAGE_EDITED: EditPayload,
    SystemType.REPLY: MessageRefPayload,
    SystemType.REACTION_ADDED: ReactionPayload,
    SystemType.REACTION_REMOVED: ReactionPayload,
    SystemType.CALL_STARTED: CallStartedPayload,
    SystemType.CALL_ENDED: CallEndedPayload,
    SystemType.BOOST_ADDED: BoostPayload,
    SystemType.THREAD_CREATED: ThreadCreatedPayload,
    SystemType.INVITE_SENT: InvitePayload,
    SystemType.UNKNOWN: UnknownPayload,
}
