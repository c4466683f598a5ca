"""Unit tests for the message union, sources and system payloads."""

from __future__ import annotations

from datetime import datetime, timezone

import pydantic
import pytest

from syncrelay.content import Content, ContentFormat
from syncrelay.models import (
    MESSAGE_TYPE_MAP,
    SYSTEM_PAYLOAD_MAP,
    ChannelSource,
    GroupSource,
    LocationMessage,
    MediaKind,
    MediaMessage,
    MessageType,
    PrivateSource,
    SystemMessage,
    SystemType,
    TextMessage,
    User,
    parse_message,
)
from syncrelay.models.system import (
    CallEndedPayload,
    MessageRefPayload,
    UnknownPayload,
    UserPayload,
)


class TestMessageBase:
    def test_defaults(self):
        msg = TextMessage(id="m1", content=Content("hi"))
        assert msg.type == "text"
        assert msg.sender == "unknown"
        assert isinstance(msg.source, PrivateSource)
        assert msg.alt is None
        assert msg.extra == {}
        assert msg.timestamp.tzinfo is not None

    def test_sender_may_be_user_or_role(self):
        assert TextMessage(id="m", content=Content("x"), sender="bot").sender == "bot"
        user = User(id="u1", name="Ada")
        assert TextMessage(id="m", content=Content("x"), sender=user).sender == user

    def test_unknown_sender_role_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TextMessage(id="m", content=Content("x"), sender="admin")

    def test_unknown_fields_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TextMessage(id="m", content=Content("x"), bogus=1)

    def test_messages_are_mutable(self):
        msg = TextMessage(id="m", content=Content("x"))
        msg.extra["seen"] = True
        msg.content = Content("y")
        assert msg.extra == {"seen": True}
        assert msg.content.raw_text == "y"

    def test_extra_defaults_are_not_shared(self):
        a = TextMessage(id="a", content=Content("x"))
        b = TextMessage(id="b", content=Content("x"))
        a.extra["k"] = 1
        assert b.extra == {}


class TestSources:
    def test_discriminated_by_type(self):
        msg = TextMessage(
            id="m",
            content=Content("x"),
            source={"type": "group", "group_id": "g1", "group_name": "Team"},
        )
        assert isinstance(msg.source, GroupSource)
        assert msg.source.group_name == "Team"

    def test_platform_fields_allowed(self):
        source = ChannelSource(channel_id="c1", chat_type="supergroup")
        assert source.model_dump()["chat_type"] == "supergroup"

    def test_missing_required_id(self):
        with pytest.raises(pydantic.ValidationError):
            TextMessage(id="m", content=Content("x"), source={"type": "forum"})


class TestVariants:
    def test_media_requires_contents(self):
        with pytest.raises(pydantic.ValidationError):
            MediaMessage(id="m", contents=[])

    def test_media_size_non_negative(self):
        with pytest.raises(pydantic.ValidationError):
            MediaMessage(
                id="m", contents=[{"kind": "image", "url": "http://x/y.png"}], size=-1
            )

    def test_media_kind_coerced(self):
        msg = MediaMessage(id="m", contents=[{"kind": "sticker", "url": "http://x/s"}])
        assert msg.contents[0].kind is MediaKind.STICKER

    @pytest.mark.parametrize(
        "latitude,longitude", [(91, 0), (-91, 0), (0, 181), (0, -181)]
    )
    def test_location_bounds(self, latitude, longitude):
        with pytest.raises(pydantic.ValidationError):
            LocationMessage(id="m", latitude=latitude, longitude=longitude)

    def test_location_edges_accepted(self):
        msg = LocationMessage(id="m", latitude=-90, longitude=180)
        assert (msg.latitude, msg.longitude) == (-90, 180)

    def test_type_map_covers_every_variant(self):
        assert set(MESSAGE_TYPE_MAP) == set(MessageType)
        for message_type, cls in MESSAGE_TYPE_MAP.items():
            assert cls.model_fields["type"].default == message_type.value


class TestSystemMessages:
    def test_payload_coerced_from_mapping(self):
        msg = SystemMessage(
            id="s1", system_type="user_joined", payload={"user": {"id": "u1"}}
        )
        assert msg.system_type is SystemType.USER_JOINED
        assert isinstance(msg.payload, UserPayload)
        assert msg.payload.user.id == "u1"

    def test_mismatched_payload_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            SystemMessage(
                id="s1",
                system_type=SystemType.CALL_ENDED,
                payload=UserPayload(user=User(id="u1")),
            )

    def test_payload_constraints_enforced(self):
        with pytest.raises(pydantic.ValidationError):
            SystemMessage(
                id="s1",
                system_type="call_ended",
                payload={"call_id": "c", "duration_ms": -5},
            )

    def test_payload_rejects_unknown_keys(self):
        with pytest.raises(pydantic.ValidationError):
            SystemMessage(
                id="s1",
                system_type="call_ended",
                payload={"call_id": "c", "duration_ms": 5, "extra": True},
            )

    def test_reply_carries_full_message(self):
        msg = SystemMessage(
            id="s1",
            system_type="reply",
            payload={
                "message": {"type": "text", "id": "m0", "content": {"raw_text": "hi"}}
            },
        )
        assert isinstance(msg.payload, MessageRefPayload)
        assert isinstance(msg.payload.message, TextMessage)

    def test_unknown_event_keeps_raw_data(self):
        msg = SystemMessage(
            id="s1", system_type="unknown", payload={"raw": {"platform": "x"}}
        )
        assert isinstance(msg.payload, UnknownPayload)
        assert msg.payload.raw == {"platform": "x"}

    def test_payload_map_covers_every_system_type(self):
        assert set(SYSTEM_PAYLOAD_MAP) == set(SystemType)

    def test_dump_includes_subclass_fields(self):
        msg = SystemMessage(
            id="s1",
            system_type="call_ended",
            payload=CallEndedPayload(call_id="c1", duration_ms=1500),
        )
        dumped = msg.model_dump(mode="json")
        assert dumped["payload"] == {"call_id": "c1", "duration_ms": 1500}


class TestParseMessage:
    def test_parses_mapping(self):
        msg = parse_message(
            {
                "type": "text",
                "id": "m1",
                "timestamp": "2026-01-01T00:00:00Z",
                "content": {"raw_text": "<b>hi</b>", "format": "html"},
            }
        )
        assert isinstance(msg, TextMessage)
        assert msg.content.format is ContentFormat.HTML
        assert msg.timestamp == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_parses_json_document(self):
        msg = parse_message('{"type": "location", "id": "l1", "latitude": 1, "longitude": 2}')
        assert isinstance(msg, LocationMessage)

    def test_system_message_survives_json_dump(self):
        original = SystemMessage(
            id="s1",
            system_type="reaction_added",
            payload={"message_id": "m1", "reaction": "+1"},
        )
        parsed = parse_message(original.model_dump_json())
        assert parsed == original

    def test_unknown_type_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            parse_message({"type": "poll", "id": "p1"})

    def test_missing_type_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            parse_message({"id": "p1", "content": {"raw_text": "x"}})
