"""Priority-ordered processor pipelines.

A pipeline is a list of named, side-effecting processors run one after the
other over a message.  Two scopes exist: global pipelines owned by the relay
(interceptors before fan-out, handlers after it) and destination-scoped
pipelines owned by each publisher.

A failing processor never stops the pipeline.  Its error is wrapped in a
``ProcessingError``, logged with the processor's name and reported back as
a typed ``ProcessorOutcome``; the next processor runs as usual.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from enum import Enum
from operator import attrgetter
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from syncrelay.core._helpers import flatten, run_step
from syncrelay.errors import ConfigurationError, ProcessingError, StepTimeoutError

if TYPE_CHECKING:
    from syncrelay.models import MessageBase

logger = logging.getLogger(__name__)

ProcessorAction = Callable[[Any], Awaitable[None]]


class Processor(BaseModel):
    """A named action run over a message before or after it is relayed.

    Lower ``priority`` runs earlier; equal priorities run in the order the
    processors were added.  Actions should be safe to retry; the pipeline
    itself never retries.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    priority: int = 0
    action: ProcessorAction

    async def process(self, message: MessageBase) -> None:
        await self.action(message)


def processor(
    name: str | None = None, *, priority: int = 0
) -> Callable[[ProcessorAction], Processor]:
    """Decorator turning an async function into a ``Processor``.

    Examples
    --------
    >>> @processor(priority=10)
    ... async def tag_origin(message):
    ...     message.extra["relayed"] = True
    >>> tag_origin.name, tag_origin.priority
    ('tag_origin', 10)
    """

    def decorate(action: ProcessorAction) -> Processor:
        return Processor(
            name=name or getattr(action, "__name__", "processor"),
            priority=priority,
            action=action,
        )

    return decorate


class ProcessorStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class ProcessorOutcome(BaseModel):
    """What happened when one processor ran over one message."""

    model_config = ConfigDict(frozen=True)

    processor_name: str
    status: ProcessorStatus
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is ProcessorStatus.SUCCEEDED


class ProcessorPipeline:
    """An ordered, priority-sorted sequence of processors.

    Parameters
    ----------
    processors:
        Initial processors; sorted on insertion like any later ``add``.
    name:
        Label used in log lines (e.g. ``"global interceptors"``).
    """

    def __init__(
        self,
        processors: Iterable[Processor] = (),
        *,
        name: str = "pipeline",
    ) -> None:
        self._name = name
        self._processors: list[Processor] = []
        self._frozen = False
        self.add(*processors)

    # -- Setup ----------------------------------------------------------------

    def add(self, *processors: Processor | Iterable[Processor]) -> ProcessorPipeline:
        """Append processors and re-sort by ascending priority (stable).

        Raises
        ------
        ConfigurationError
            If the pipeline has been frozen because serving started.
        TypeError
            If an item is not a ``Processor``.
        """
        if self._frozen:
            raise ConfigurationError(
                f"Cannot add processors to {self._name}: serving has already started."
            )
        new = list(flatten(processors))
        for item in new:
            if not isinstance(item, Processor):
                raise TypeError(
                    f"{self._name} accepts Processor instances, got {type(item).__name__}"
                )
        self._processors.extend(new)
        self._processors.sort(key=attrgetter("priority"))
        return self

    def freeze(self) -> None:
        """Reject further ``add`` calls (serving phase)."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def processors(self) -> tuple[Processor, ...]:
        return tuple(self._processors)

    def __len__(self) -> int:
        return len(self._processors)

    def __iter__(self) -> Iterator[Processor]:
        return iter(tuple(self._processors))

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self._processors)
        return f"ProcessorPipeline(name={self._name!r}, processors=[{names}])"

    # -- Execution ------------------------------------------------------------

    async def run(
        self, message: MessageBase, *, timeout: float | None = None
    ) -> list[ProcessorOutcome]:
        """Run every processor over *message* in priority order.

        Each action is awaited before the next starts.  Failures and
        timeouts are contained, logged and reported in the returned
        outcomes.
        """
        outcomes: list[ProcessorOutcome] = []
        for proc in tuple(self._processors):
            try:
                await run_step(
                    proc.process(message),
                    step=f"processor:{proc.name}",
                    timeout=timeout,
                )
            except StepTimeoutError as exc:
                logger.error(
                    "%s: processor '%s' timed out on message %s: %s",
                    self._name,
                    proc.name,
                    message.id,
                    exc,
                )
                outcomes.append(
                    ProcessorOutcome(
                        processor_name=proc.name,
                        status=ProcessorStatus.TIMED_OUT,
                        error=str(exc),
                    )
                )
            except Exception as exc:  # noqa: BLE001
                error = ProcessingError(proc.name, exc)
                logger.error(
                    "%s: %s (message %s)",
                    self._name,
                    error,
                    message.id,
                    exc_info=exc,
                )
                outcomes.append(
                    ProcessorOutcome(
                        processor_name=proc.name,
                        status=ProcessorStatus.FAILED,
                        error=str(error),
                    )
                )
            else:
                outcomes.append(
                    ProcessorOutcome(
                        processor_name=proc.name,
                        status=ProcessorStatus.SUCCEEDED,
                    )
                )
        return outcomes
