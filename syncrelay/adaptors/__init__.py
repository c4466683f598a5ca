"""Adaptor interfaces — the contracts every platform integration implements.

An adaptor connects the relay to one external communication system.  Its
role is declared by the classes it inherits from, never inferred:

* ``SubscribableAdaptor`` receives inbound webhook requests and turns them
  into messages.
* ``PublishableAdaptor`` sends text messages out.  Publishers that can do
  more also inherit ``MediaPublisher``, ``LocationPublisher`` and/or
  ``SystemPublisher``.
* ``SyncableAdaptor`` is both.

Subscribers that can register their own callback URL with the remote
service additionally inherit ``WebhookConfigurable``.

Example
-------
>>> class EchoAdaptor(SyncableAdaptor, MediaPublisher):
...     async def receive(self, request):
...         return None
...     async def send_text(self, message):
...         return True
...     async def send_media(self, message):
...         return True
>>> EchoAdaptor("echo").id
'echo'
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from syncrelay.core.pipeline import Processor, ProcessorPipeline

if TYPE_CHECKING:
    from syncrelay.models import (
        LocationMessage,
        MediaMessage,
        MessageBase,
        SystemMessage,
        TextMessage,
    )


class AdaptorBase(abc.ABC):
    """Identity plus destination-scoped interceptors and handlers.

    Parameters
    ----------
    adaptor_id:
        Unique id, also the last path segment of the adaptor's webhook URL.
        Validated at registration time, not here.
    interceptors, handlers:
        Processors applied only to messages flowing out through this
        adaptor, before and after its send call respectively.
    """

    def __init__(
        self,
        adaptor_id: str,
        *,
        interceptors: Sequence[Processor] = (),
        handlers: Sequence[Processor] = (),
    ) -> None:
        self.id = adaptor_id
        self.interceptors = ProcessorPipeline(
            interceptors, name=f"{adaptor_id} interceptors"
        )
        self.handlers = ProcessorPipeline(handlers, name=f"{adaptor_id} handlers")

    def intercept(self, *processors: Processor) -> AdaptorBase:
        self.interceptors.add(*processors)
        return self

    def handle(self, *processors: Processor) -> AdaptorBase:
        self.handlers.add(*processors)
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class SubscribableAdaptor(AdaptorBase):
    """An adaptor that receives messages from its external system."""

    @abc.abstractmethod
    async def receive(self, request: Any) -> Sequence[MessageBase] | None:
        """Turn one inbound webhook request into zero or more messages.

        Parameters
        ----------
        request:
            The transport's raw request object (a Starlette ``Request``
            when served through ``syncrelay.webhook``).

        Returns
        -------
        Sequence[MessageBase] | None
            Messages to relay, or ``None`` when the request carries nothing
            to relay (e.g. a verification ping).
        """
        ...


class WebhookConfigurable(abc.ABC):
    """A subscriber that can tell its remote service where to call back."""

    @abc.abstractmethod
    async def set_webhook_url(self, url: str) -> bool:
        """Register *url* with the remote service.  Return ``True`` on success."""
        ...


class PublishableAdaptor(AdaptorBase):
    """An adaptor that can send messages to its external system."""

    @abc.abstractmethod
    async def send_text(self, message: TextMessage) -> bool:
        """Send a text message.  Return ``True`` if it was delivered."""
        ...


class MediaPublisher(abc.ABC):
    """Optional publish capability for media messages."""

    @abc.abstractmethod
    async def send_media(self, message: MediaMessage) -> bool:
        ...


class LocationPublisher(abc.ABC):
    """Optional publish capability for location messages."""

    @abc.abstractmethod
    async def send_location(self, message: LocationMessage) -> bool:
        ...


class SystemPublisher(abc.ABC):
    """Optional publish capability for system (chat event) messages."""

    @abc.abstractmethod
    async def send_system(self, message: SystemMessage) -> bool:
        ...


class SyncableAdaptor(SubscribableAdaptor, PublishableAdaptor):
    """An adaptor that both receives and sends (two-way sync)."""


def is_syncable(adaptor: object) -> bool:
    return isinstance(adaptor, SubscribableAdaptor) and isinstance(
        adaptor, PublishableAdaptor
    )


__all__ = [
    "AdaptorBase",
    "SubscribableAdaptor",
    "PublishableAdaptor",
    "SyncableAdaptor",
    "MediaPublisher",
    "LocationPublisher",
    "SystemPublisher",
    "WebhookConfigurable",
    "is_syncable",
]
