"""DispatchEngine — relays one inbound message to every other publisher.

Phases, strictly in this order:

1. Global interceptors run to completion.
2. Fan-out: one leg per publisher whose id differs from the origin's.
   Each leg awaits, in order, the publisher's own interceptors, the send
   call, then the publisher's own handlers.  Legs run concurrently.
3. Once every leg has settled, global handlers run to completion.

Delivery is best effort.  A leg whose send returns ``False`` or raises is
logged as a ``DeliveryFailure``; sibling legs and the global handlers run
regardless.  ``dispatch`` returns nothing: per-destination outcomes are
only observable through logs and processors.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from syncrelay.adaptors import PublishableAdaptor, SubscribableAdaptor
from syncrelay.core._helpers import run_step
from syncrelay.core.pipeline import ProcessorPipeline
from syncrelay.core.registry import AdaptorRegistry
from syncrelay.core.resolver import send_message
from syncrelay.errors import DeliveryFailure
from syncrelay.models import MessageBase

logger = logging.getLogger(__name__)


class DeliveryReport(BaseModel):
    """Outcome of one fan-out leg."""

    model_config = ConfigDict(frozen=True)

    publisher_id: str
    delivered: bool
    error: str = ""


class DispatchEngine:
    """Runs the interceptor / fan-out / handler phases for each message.

    The engine owns no state of its own: the registry and the global
    pipelines are handed in by whoever built them (normally ``SyncRelay``)
    and are expected to stay unchanged once serving starts.

    Parameters
    ----------
    registry:
        Source of the publishers to fan out to.
    interceptors, handlers:
        Global pipelines run before and after fan-out.
    step_timeout:
        Seconds allowed for each processor action and each send call.
        ``None`` waits indefinitely.
    """

    def __init__(
        self,
        registry: AdaptorRegistry,
        interceptors: ProcessorPipeline,
        handlers: ProcessorPipeline,
        *,
        step_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._interceptors = interceptors
        self._handlers = handlers
        self._step_timeout = step_timeout

    @property
    def step_timeout(self) -> float | None:
        return self._step_timeout

    async def dispatch(
        self, message: MessageBase, origin: SubscribableAdaptor | str
    ) -> None:
        """Relay *message*, received from *origin*, to every other publisher."""
        origin_id = origin if isinstance(origin, str) else origin.id

        await self._interceptors.run(message, timeout=self._step_timeout)

        publishers = self._registry.publishers_for(origin_id)
        results = await asyncio.gather(
            *(self._run_leg(publisher, message) for publisher in publishers),
            return_exceptions=True,
        )
        reports = [
            result
            if isinstance(result, DeliveryReport)
            else DeliveryReport(
                publisher_id=publisher.id, delivered=False, error=repr(result)
            )
            for publisher, result in zip(publishers, results)
        ]
        self._log_summary(message, origin_id, reports)

        await self._handlers.run(message, timeout=self._step_timeout)

    async def dispatch_batch(
        self, messages: Iterable[MessageBase], origin: SubscribableAdaptor | str
    ) -> None:
        """Dispatch every message of an inbound batch concurrently."""
        await asyncio.gather(*(self.dispatch(message, origin) for message in messages))

    async def _run_leg(
        self, publisher: PublishableAdaptor, message: MessageBase
    ) -> DeliveryReport:
        await publisher.interceptors.run(message, timeout=self._step_timeout)

        failure: DeliveryFailure | None = None
        try:
            delivered = bool(
                await run_step(
                    send_message(publisher, message),
                    step=f"send:{publisher.id}",
                    timeout=self._step_timeout,
                )
            )
        except Exception as exc:  # noqa: BLE001
            delivered = False
            failure = DeliveryFailure(publisher.id, message.id, exc)
            logger.error("%s", failure, exc_info=exc)
        else:
            if not delivered:
                failure = DeliveryFailure(publisher.id, message.id)
                logger.warning("%s", failure)

        await publisher.handlers.run(message, timeout=self._step_timeout)

        return DeliveryReport(
            publisher_id=publisher.id,
            delivered=delivered,
            error=str(failure) if failure is not None else "",
        )

    @staticmethod
    def _log_summary(
        message: MessageBase, origin_id: str, reports: list[DeliveryReport]
    ) -> None:
        if not reports:
            logger.info(
                "Message %s from %s: no other publishers registered",
                message.id,
                origin_id,
            )
            return
        delivered = sum(1 for r in reports if r.delivered)
        log = logger.info if delivered == len(reports) else logger.warning
        log(
            "Message %s from %s: %d/%d destinations delivered",
            message.id,
            origin_id,
            delivered,
            len(reports),
        )
