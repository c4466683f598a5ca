"""SyncRelay — the object applications configure and serve.

The relay owns the adaptor registry and the two global pipelines and hands
them to a ``DispatchEngine``.  Its life has two phases:

* **setup**: register adaptors, add processors, apply plugins;
* **serving**: entered by ``start()`` (or implicitly by the first
  ``dispatch``/``receive``).  The registry and every pipeline are frozen,
  queued webhook URLs are announced to their adaptors, and any further
  setup call raises ``ConfigurationError``.

Usage
-----
>>> relay = SyncRelay("https://relay.example.com/hooks")
>>> relay.webhook_url("telegram")
'https://relay.example.com/hooks/telegram'
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from syncrelay.adaptors import (
    PublishableAdaptor,
    SubscribableAdaptor,
    WebhookConfigurable,
)
from syncrelay.config import RelaySettings
from syncrelay.core._helpers import flatten, run_step
from syncrelay.core.dispatcher import DispatchEngine
from syncrelay.core.pipeline import Processor, ProcessorPipeline
from syncrelay.core.registry import AdaptorRegistry
from syncrelay.errors import ConfigurationError
from syncrelay.models import MessageBase
from syncrelay.urls import build_webhook_url, normalize_base_url

logger = logging.getLogger(__name__)

SyncRelayPlugin = Callable[["SyncRelay"], None]


class SyncRelay:
    """Relays messages between subscribed and published adaptors.

    Parameters
    ----------
    base_url:
        Public URL webhooks are served under.  Defaults to
        ``settings.base_url``.  Bare hosts are assumed to be https.
    settings:
        Runtime settings; a fresh ``RelaySettings()`` (environment driven)
        when omitted.

    Raises
    ------
    ConfigurationError
        If the base URL is invalid.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        settings: RelaySettings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else RelaySettings()
        self.url = normalize_base_url(
            base_url if base_url is not None else self.settings.base_url
        )
        self.registry = AdaptorRegistry()
        self.interceptors = ProcessorPipeline(name="global interceptors")
        self.handlers = ProcessorPipeline(name="global handlers")
        self.engine = DispatchEngine(
            self.registry,
            self.interceptors,
            self.handlers,
            step_timeout=self.settings.step_timeout_seconds,
        )
        self._serving = False
        self._pending_webhooks: list[SubscribableAdaptor] = []
        self.registry.on_subscribe(self._queue_webhook)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def subscribe(self, *adaptors: SubscribableAdaptor | Iterable[SubscribableAdaptor]) -> SyncRelay:
        """Register adaptors that receive messages from external services."""
        for adaptor in flatten(adaptors):
            self.registry.register_subscriber(adaptor)
        return self

    def publish(self, *adaptors: PublishableAdaptor | Iterable[PublishableAdaptor]) -> SyncRelay:
        """Register adaptors that send messages to external services."""
        for adaptor in flatten(adaptors):
            self.registry.register_publisher(adaptor)
        return self

    def sync(self, *adaptors: Any) -> SyncRelay:
        """Register two-way adaptors as both subscriber and publisher."""
        for adaptor in flatten(adaptors):
            self.registry.register_syncable(adaptor)
        return self

    def intercept(self, *processors: Processor | Iterable[Processor]) -> SyncRelay:
        """Add global interceptors, run before a message fans out."""
        self._ensure_setup()
        self.interceptors.add(*processors)
        return self

    def handle(self, *processors: Processor | Iterable[Processor]) -> SyncRelay:
        """Add global handlers, run after every destination has settled."""
        self._ensure_setup()
        self.handlers.add(*processors)
        return self

    def use(self, *plugins: SyncRelayPlugin | Iterable[SyncRelayPlugin]) -> SyncRelay:
        """Apply plugins: callables that configure this relay during setup."""
        self._ensure_setup()
        for plugin in flatten(plugins):
            plugin(self)
        return self

    @property
    def subscribers(self) -> list[SubscribableAdaptor]:
        return self.registry.subscribers

    @property
    def publishers(self) -> list[PublishableAdaptor]:
        return self.registry.publishers

    def webhook_url(self, adaptor_id: str) -> str:
        """Full callback URL for the subscriber *adaptor_id*."""
        return build_webhook_url(self.url, adaptor_id)

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------

    @property
    def serving(self) -> bool:
        return self._serving

    async def start(self) -> None:
        """Enter the serving phase.  Idempotent.

        Freezes the registry and all pipelines, then asks every
        ``WebhookConfigurable`` subscriber to register its callback URL.
        A failing announcement is logged and otherwise ignored.
        """
        if self._serving:
            return
        self._serving = True
        self.registry.close()
        self.interceptors.freeze()
        self.handlers.freeze()
        for publisher in self.registry.publishers:
            publisher.interceptors.freeze()
            publisher.handlers.freeze()
        logger.info(
            "Relay serving at %s (%d subscribers, %d publishers)",
            self.url,
            len(self.registry.subscribers),
            len(self.registry.publishers),
        )

        pending, self._pending_webhooks = self._pending_webhooks, []
        await asyncio.gather(*(self._announce_webhook(adaptor) for adaptor in pending))

    async def dispatch(
        self, message: MessageBase, origin: SubscribableAdaptor | str
    ) -> None:
        """Relay one message received from *origin*."""
        await self.start()
        await self.engine.dispatch(message, origin)

    async def receive(self, adaptor_id: str, request: Any) -> int:
        """Hand an inbound request to subscriber *adaptor_id* and relay the result.

        Returns the number of messages dispatched.

        Raises
        ------
        AdaptorNotFoundError
            If no subscriber has that id.
        """
        await self.start()
        adaptor = self.registry.get_subscriber(adaptor_id)
        messages = await run_step(
            adaptor.receive(request),
            step=f"receive:{adaptor_id}",
            timeout=self.engine.step_timeout,
        )
        if not messages:
            return 0
        messages = list(messages)
        await self.engine.dispatch_batch(messages, adaptor)
        return len(messages)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_setup(self) -> None:
        if self._serving:
            raise ConfigurationError(
                "The relay is already serving; finish setup before start()."
            )

    def _queue_webhook(self, adaptor: SubscribableAdaptor) -> None:
        if isinstance(adaptor, WebhookConfigurable):
            self._pending_webhooks.append(adaptor)

    async def _announce_webhook(self, adaptor: SubscribableAdaptor) -> None:
        url = self.webhook_url(adaptor.id)
        try:
            ok = await run_step(
                adaptor.set_webhook_url(url),
                step=f"set_webhook_url:{adaptor.id}",
                timeout=self.engine.step_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Failed to set webhook URL for %s: %s", adaptor.id, exc, exc_info=exc
            )
            return
        if ok:
            logger.info("Webhook URL for %s set to %s", adaptor.id, url)
        else:
            logger.warning("Adaptor %s rejected webhook URL %s", adaptor.id, url)
