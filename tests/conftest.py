"""Shared test fixtures for syncrelay."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import pytest

from syncrelay.adaptors import (
    LocationPublisher,
    MediaPublisher,
    PublishableAdaptor,
    SubscribableAdaptor,
    SyncableAdaptor,
    SystemPublisher,
    WebhookConfigurable,
)
from syncrelay.config import RelaySettings
from syncrelay.content import Content
from syncrelay.core.pipeline import Processor
from syncrelay.models import (
    LocationMessage,
    MediaItem,
    MediaKind,
    MediaMessage,
    MessageBase,
    PrivateSource,
    TextMessage,
    User,
)
from syncrelay.relay import SyncRelay

# ---------------------------------------------------------------------------
# Fake adaptors
# ---------------------------------------------------------------------------


class RecordingPublisher(PublishableAdaptor):
    """Text-only publisher remembering everything it was asked to send."""

    def __init__(
        self,
        adaptor_id: str,
        *,
        result: bool = True,
        call_log: list[str] | None = None,
    ) -> None:
        super().__init__(adaptor_id)
        self.result = result
        self.call_log = call_log if call_log is not None else []
        self.sent: list[tuple[str, MessageBase]] = []

    def _record(self, capability: str, message: MessageBase) -> bool:
        self.sent.append((capability, message))
        self.call_log.append(f"{self.id}.{capability}")
        return self.result

    async def send_text(self, message: TextMessage) -> bool:
        return self._record("send_text", message)

    def calls(self, capability: str) -> list[MessageBase]:
        return [m for cap, m in self.sent if cap == capability]


class FullPublisher(RecordingPublisher, MediaPublisher, LocationPublisher, SystemPublisher):
    """Publisher with every optional capability."""

    async def send_media(self, message: MediaMessage) -> bool:
        return self._record("send_media", message)

    async def send_location(self, message: LocationMessage) -> bool:
        return self._record("send_location", message)

    async def send_system(self, message: Any) -> bool:
        return self._record("send_system", message)


class StaticSubscriber(SubscribableAdaptor):
    """Subscriber whose ``receive`` returns a fixed batch."""

    def __init__(
        self, adaptor_id: str, messages: Sequence[MessageBase] | None = None
    ) -> None:
        super().__init__(adaptor_id)
        self.messages = messages
        self.requests: list[Any] = []

    async def receive(self, request: Any) -> Sequence[MessageBase] | None:
        self.requests.append(request)
        return self.messages


class WebhookSubscriber(StaticSubscriber, WebhookConfigurable):
    """Subscriber that records the callback URL it is given."""

    def __init__(self, adaptor_id: str, *, accept: bool = True) -> None:
        super().__init__(adaptor_id)
        self.accept = accept
        self.webhook_urls: list[str] = []

    async def set_webhook_url(self, url: str) -> bool:
        self.webhook_urls.append(url)
        return self.accept


class EchoSyncable(SyncableAdaptor):
    """Two-way adaptor: fixed inbound batch, recorded outbound text."""

    def __init__(
        self, adaptor_id: str, messages: Sequence[MessageBase] | None = None
    ) -> None:
        super().__init__(adaptor_id)
        self.messages = messages
        self.sent: list[MessageBase] = []

    async def receive(self, request: Any) -> Sequence[MessageBase] | None:
        return self.messages

    async def send_text(self, message: TextMessage) -> bool:
        self.sent.append(message)
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> RelaySettings:
    """Settings with a short step timeout so hung steps fail fast."""
    return RelaySettings(step_timeout_seconds=2.0)


@pytest.fixture
def relay(settings: RelaySettings) -> SyncRelay:
    """A fresh relay rooted at http://localhost."""
    return SyncRelay("http://localhost", settings=settings)


@pytest.fixture
def call_log() -> list[str]:
    """Shared ordered log that fakes and recording processors append to."""
    return []


@pytest.fixture
def make_publisher(call_log: list[str]) -> Callable[..., RecordingPublisher]:
    """Factory fixture: text-only publisher writing to the shared call log."""

    def _factory(adaptor_id: str = "pub", **kwargs: Any) -> RecordingPublisher:
        kwargs.setdefault("call_log", call_log)
        return RecordingPublisher(adaptor_id, **kwargs)

    return _factory


@pytest.fixture
def make_full_publisher(call_log: list[str]) -> Callable[..., FullPublisher]:
    """Factory fixture: publisher with every optional capability."""

    def _factory(adaptor_id: str = "full", **kwargs: Any) -> FullPublisher:
        kwargs.setdefault("call_log", call_log)
        return FullPublisher(adaptor_id, **kwargs)

    return _factory


@pytest.fixture
def make_subscriber() -> Callable[..., StaticSubscriber]:
    def _factory(
        adaptor_id: str = "sub", messages: Sequence[MessageBase] | None = None
    ) -> StaticSubscriber:
        return StaticSubscriber(adaptor_id, messages)

    return _factory


@pytest.fixture
def make_webhook_subscriber() -> Callable[..., WebhookSubscriber]:
    def _factory(adaptor_id: str = "hooked", **kwargs: Any) -> WebhookSubscriber:
        return WebhookSubscriber(adaptor_id, **kwargs)

    return _factory


@pytest.fixture
def make_syncable() -> Callable[..., EchoSyncable]:
    def _factory(
        adaptor_id: str = "both", messages: Sequence[MessageBase] | None = None
    ) -> EchoSyncable:
        return EchoSyncable(adaptor_id, messages)

    return _factory


@pytest.fixture
def make_recorder(call_log: list[str]) -> Callable[..., Processor]:
    """Factory fixture: processor that appends its name to the call log."""

    def _factory(name: str, priority: int = 0) -> Processor:
        async def _record(message: MessageBase) -> None:
            call_log.append(name)

        return Processor(name=name, priority=priority, action=_record)

    return _factory


# ---------------------------------------------------------------------------
# Message factories
# ---------------------------------------------------------------------------

_SENDER = User(id="user1", name="Ada")
_TIMESTAMP = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_text_message() -> Callable[..., TextMessage]:
    def _factory(text: str = "hello", **overrides: Any) -> TextMessage:
        defaults: dict[str, Any] = {
            "id": "msg-text",
            "timestamp": _TIMESTAMP,
            "sender": _SENDER,
            "source": PrivateSource(user_id="user1"),
            "content": Content(text),
        }
        defaults.update(overrides)
        return TextMessage(**defaults)

    return _factory


@pytest.fixture
def make_media_message() -> Callable[..., MediaMessage]:
    def _factory(**overrides: Any) -> MediaMessage:
        defaults: dict[str, Any] = {
            "id": "msg-media",
            "timestamp": _TIMESTAMP,
            "sender": _SENDER,
            "source": PrivateSource(user_id="user1"),
            "contents": [MediaItem(kind=MediaKind.IMAGE, url="http://example.com/img.png")],
        }
        defaults.update(overrides)
        return MediaMessage(**defaults)

    return _factory


@pytest.fixture
def make_location_message() -> Callable[..., LocationMessage]:
    def _factory(**overrides: Any) -> LocationMessage:
        defaults: dict[str, Any] = {
            "id": "msg-location",
            "timestamp": _TIMESTAMP,
            "sender": _SENDER,
            "source": PrivateSource(user_id="user1"),
            "latitude": 10,
            "longitude": 20,
        }
        defaults.update(overrides)
        return LocationMessage(**defaults)

    return _factory


@pytest.fixture
def text_message(make_text_message: Callable[..., TextMessage]) -> TextMessage:
    """Convenience: a ready-made TextMessage with test defaults."""
    return make_text_message()
