"""Small helpers shared by the registry, the pipelines and the relay facade."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable, Iterator
from typing import Any, TypeVar

from syncrelay.errors import StepTimeoutError

T = TypeVar("T")


def flatten(items: Iterable[Any]) -> Iterator[Any]:
    """Yield items, expanding one level of lists and tuples.

    Lets setup calls accept either single values or sequences:
    ``relay.publish(a, [b, c])`` registers ``a``, ``b`` and ``c``.
    """
    for item in items:
        if isinstance(item, (list, tuple)):
            yield from item
        else:
            yield item


async def run_step(
    awaitable: Awaitable[T], *, step: str, timeout: float | None
) -> T:
    """Await *awaitable*, raising ``StepTimeoutError`` once *timeout* expires.

    ``timeout=None`` waits indefinitely.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise StepTimeoutError(step, timeout) from exc
