"""Adaptor registry — identity-keyed subscribers and ordered publishers.

Subscriber and publisher namespaces are independent: the same id may hold
both roles (that is exactly what a syncable adaptor does), but never the
same role twice.  The registry is populated during setup and closed when
the relay starts serving; nothing is ever removed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from syncrelay.adaptors import PublishableAdaptor, SubscribableAdaptor, is_syncable
from syncrelay.errors import (
    AdaptorNotFoundError,
    ConfigurationError,
    DuplicateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ADAPTOR_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

SubscribeListener = Callable[[SubscribableAdaptor], None]


def validate_adaptor_id(adaptor_id: object) -> str:
    """Return *adaptor_id* if it is a non-empty ``[A-Za-z0-9_-]+`` string.

    Raises
    ------
    ValidationError
        For anything else.
    """
    if not isinstance(adaptor_id, str) or not ADAPTOR_ID_PATTERN.fullmatch(adaptor_id):
        raise ValidationError(
            f"Invalid adaptor ID: {adaptor_id!r}. "
            "IDs must be alphanumeric with dashes or underscores."
        )
    return adaptor_id


class AdaptorRegistry:
    """Holds the relay's subscribers and publishers.

    Subscribers are keyed by id.  Publishers keep insertion order, which is
    the order fan-out legs are started in.

    Transport layers call ``on_subscribe`` to learn about subscriber ids so
    they can bind an inbound route for each one.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, SubscribableAdaptor] = {}
        self._publishers: list[PublishableAdaptor] = []
        self._listeners: list[SubscribeListener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_subscriber(self, adaptor: SubscribableAdaptor) -> None:
        """Register an adaptor that receives inbound messages.

        Raises
        ------
        ValidationError
            If the id is malformed or the adaptor is not subscribable.
        DuplicateError
            If a subscriber with the same id is already registered.
        ConfigurationError
            If the registry is closed.
        """
        self._ensure_open()
        self._check_subscriber(adaptor)
        self._add_subscriber(adaptor)

    def register_publisher(self, adaptor: PublishableAdaptor) -> None:
        """Register an adaptor that sends outbound messages.

        Raises
        ------
        ValidationError
            If the id is malformed or the adaptor is not publishable.
        DuplicateError
            If a publisher with the same id is already registered.
        ConfigurationError
            If the registry is closed.
        """
        self._ensure_open()
        self._check_publisher(adaptor)
        self._add_publisher(adaptor)

    def register_syncable(self, adaptor: SubscribableAdaptor) -> None:
        """Register an adaptor in both roles.

        Both namespaces are checked before either is touched, so a failed
        registration leaves the registry unchanged.
        """
        self._ensure_open()
        if not is_syncable(adaptor):
            raise ValidationError(
                f"Sync adaptor {getattr(adaptor, 'id', adaptor)!r} must be both "
                "subscribable and publishable."
            )
        self._check_subscriber(adaptor)
        self._check_publisher(adaptor)
        self._add_subscriber(adaptor)
        self._add_publisher(adaptor)

    def on_subscribe(self, listener: SubscribeListener) -> None:
        """Call *listener* for every current and future subscriber."""
        self._listeners.append(listener)
        for adaptor in list(self._subscribers.values()):
            listener(adaptor)

    def close(self) -> None:
        """End the setup phase; later registrations raise ``ConfigurationError``."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def subscribers(self) -> list[SubscribableAdaptor]:
        return list(self._subscribers.values())

    @property
    def publishers(self) -> list[PublishableAdaptor]:
        return list(self._publishers)

    def get_subscriber(self, adaptor_id: str) -> SubscribableAdaptor:
        try:
            return self._subscribers[adaptor_id]
        except KeyError:
            raise AdaptorNotFoundError(adaptor_id) from None

    def publishers_for(self, origin_id: str) -> list[PublishableAdaptor]:
        """Publishers eligible for fan-out: everyone except the origin."""
        return [p for p in self._publishers if p.id != origin_id]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConfigurationError(
                "Adaptors must be registered before the relay starts serving."
            )

    def _check_subscriber(self, adaptor: object) -> None:
        if not isinstance(adaptor, SubscribableAdaptor):
            raise ValidationError(
                f"{type(adaptor).__name__} is not a SubscribableAdaptor."
            )
        validate_adaptor_id(adaptor.id)
        if adaptor.id in self._subscribers:
            raise DuplicateError(adaptor.id, "subscriber")

    def _check_publisher(self, adaptor: object) -> None:
        if not isinstance(adaptor, PublishableAdaptor):
            raise ValidationError(
                f"{type(adaptor).__name__} is not a PublishableAdaptor."
            )
        validate_adaptor_id(adaptor.id)
        if any(p.id == adaptor.id for p in self._publishers):
            raise DuplicateError(adaptor.id, "publisher")

    def _add_subscriber(self, adaptor: SubscribableAdaptor) -> None:
        self._subscribers[adaptor.id] = adaptor
        logger.info("Registered subscriber: %s", adaptor.id)
        for listener in self._listeners:
            listener(adaptor)

    def _add_publisher(self, adaptor: PublishableAdaptor) -> None:
        self._publishers.append(adaptor)
        logger.info("Registered publisher: %s", adaptor.id)
