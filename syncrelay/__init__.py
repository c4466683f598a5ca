"""syncrelay: relay messages between independent chat platforms.

A message received from one adaptor is passed through global
interceptors, fanned out concurrently to every other publishing adaptor
(each with its own interceptors, capability-aware send and handlers) and
finally through global handlers.  Rich text travels as format-tagged
``Content`` that converts between HTML, Markdown, plain text and
offset-based entities on demand.
"""

__version__ = "0.1.0"

from syncrelay.adaptors import (
    LocationPublisher,
    MediaPublisher,
    PublishableAdaptor,
    SubscribableAdaptor,
    SyncableAdaptor,
    SystemPublisher,
    WebhookConfigurable,
)
from syncrelay.content import Content, ContentFormat, EntityType, MessageEntity
from syncrelay.core.pipeline import Processor, processor
from syncrelay.relay import SyncRelay

__all__ = [
    "SyncRelay",
    "Content",
    "ContentFormat",
    "EntityType",
    "MessageEntity",
    "Processor",
    "processor",
    "SubscribableAdaptor",
    "PublishableAdaptor",
    "SyncableAdaptor",
    "MediaPublisher",
    "LocationPublisher",
    "SystemPublisher",
    "WebhookConfigurable",
    "__version__",
]
