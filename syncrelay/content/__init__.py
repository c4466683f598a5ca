"""Rich-text content model — HTML/Markdown normalization and entity extraction."""

from syncrelay.content.content import (
    Content,
    ContentFormat,
    EntityType,
    MessageEntity,
    RichText,
)

__all__ = ["Content", "ContentFormat", "EntityType", "MessageEntity", "RichText"]
