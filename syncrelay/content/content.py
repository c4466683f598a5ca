"""Format-tagged rich text and its derived representations.

A ``Content`` value stores exactly two things: the raw text and the format
it is written in.  Every other representation (the opposite format, plain
text, the entity list) is recomputed on each call from those two fields, so
a ``Content`` can be shared freely between concurrent fan-out legs.

Markdown is rendered with markdown-it-py (CommonMark plus strikethrough,
raw HTML passed through), HTML is turned back into Markdown with
markdownify, and entity extraction walks a BeautifulSoup tree.
"""

from __future__ import annotations

from enum import Enum
from operator import attrgetter
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag
from markdown_it import MarkdownIt
from markdownify import markdownify
from pydantic import BaseModel, ConfigDict, Field, field_validator

from syncrelay.errors import ConversionError


_MARKDOWN = MarkdownIt("commonmark").enable("strikethrough")


class ContentFormat(str, Enum):
    """The two textual representations a ``Content`` can be written in."""

    HTML = "html"
    MARKDOWN = "markdown"

    @classmethod
    def _missing_(cls, value: object) -> ContentFormat | None:
        if isinstance(value, str) and value.lower() == "md":
            return cls.MARKDOWN
        return None


class EntityType(str, Enum):
    """Inline formatting kinds understood by offset-based renderers."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    PRE = "pre"
    TEXT_LINK = "text_link"


# Tags without an entry here contribute their text but no entity.
_TAG_ENTITY_TYPES: dict[str, EntityType] = {
    "strong": EntityType.BOLD,
    "b": EntityType.BOLD,
    "em": EntityType.ITALIC,
    "i": EntityType.ITALIC,
    "u": EntityType.UNDERLINE,
    "del": EntityType.STRIKETHROUGH,
    "s": EntityType.STRIKETHROUGH,
    "code": EntityType.CODE,
    "pre": EntityType.PRE,
    "a": EntityType.TEXT_LINK,
}


class MessageEntity(BaseModel):
    """A span of formatting located by offset/length over plain text.

    Offsets and lengths count Python ``str`` code points.  Destinations
    that address text in UTF-16 code units must convert in their adaptor.
    """

    model_config = ConfigDict(frozen=True)

    type: EntityType
    offset: int = Field(ge=0)
    length: int = Field(gt=0)
    url: str | None = None
    language: str | None = None


class RichText(BaseModel):
    """Plain text plus the entities that format it."""

    model_config = ConfigDict(frozen=True)

    plain_text: str
    entities: list[MessageEntity] = []


class Content(BaseModel):
    """Immutable rich-text value tagged with its format.

    Examples
    --------
    >>> Content("**bold** and `code`").to_plain_text()
    'bold and code'
    >>> Content("<b>hi</b>", "html").to_markdown()
    '**hi**'
    """

    model_config = ConfigDict(frozen=True)

    raw_text: str
    format: ContentFormat = ContentFormat.MARKDOWN

    def __init__(
        self,
        raw_text: str,
        format: ContentFormat | str = ContentFormat.MARKDOWN,
        **data: Any,
    ) -> None:
        super().__init__(raw_text=raw_text, format=format, **data)

    @field_validator("format", mode="before")
    @classmethod
    def _coerce_format(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ContentFormat):
            return ContentFormat(value)
        return value

    @classmethod
    def from_html(cls, raw_text: str) -> Content:
        return cls(raw_text, ContentFormat.HTML)

    @classmethod
    def from_markdown(cls, raw_text: str) -> Content:
        return cls(raw_text, ContentFormat.MARKDOWN)

    # ------------------------------------------------------------------
    # Format conversion
    # ------------------------------------------------------------------

    def to_html(self) -> str:
        """Return the HTML representation.

        Raises
        ------
        ConversionError
            If the Markdown renderer fails or yields something other than text.
        """
        if self.format is ContentFormat.HTML:
            return self.raw_text
        try:
            html = _MARKDOWN.render(self.raw_text)
        except Exception as exc:
            raise ConversionError(f"Markdown rendering failed: {exc}") from exc
        if not isinstance(html, str):
            raise ConversionError(
                f"Markdown rendering produced {type(html).__name__}, expected str"
            )
        return html.strip()

    def to_markdown(self) -> str:
        """Return the Markdown representation.

        Raises
        ------
        ConversionError
            If the HTML converter fails or yields something other than text.
        """
        if self.format is ContentFormat.MARKDOWN:
            return self.raw_text
        try:
            markdown = markdownify(
                self.raw_text, heading_style="ATX", strong_em_symbol="*"
            )
        except Exception as exc:
            raise ConversionError(f"HTML to Markdown conversion failed: {exc}") from exc
        if not isinstance(markdown, str):
            raise ConversionError(
                f"HTML to Markdown conversion produced {type(markdown).__name__}, "
                "expected str"
            )
        return markdown.strip()

    # ------------------------------------------------------------------
    # Entity extraction
    # ------------------------------------------------------------------

    def to_message_entities(self) -> RichText:
        """Flatten the content into plain text plus offset-based entities.

        The HTML representation is walked depth first.  Text nodes extend
        the plain-text buffer; an element emits an entity (per the tag
        table) covering whatever its children appended, provided that is
        non-empty.  Entities are ordered by offset, ties in document order.
        The returned plain text is trimmed and every span is re-based onto
        the trimmed text.
        """
        soup = BeautifulSoup(self.to_html(), "html.parser")
        collector = _EntityCollector()
        collector.visit(soup)
        return collector.result()

    def to_plain_text(self) -> str:
        return self.to_message_entities().plain_text.strip()


class _EntityCollector:
    """Depth-first walker accumulating plain text and entity slots.

    A slot is reserved for each element *before* its children are visited,
    so the slot list is in document (pre-order) order even though entities
    are only known once the children are done.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._length = 0
        self._slots: list[MessageEntity | None] = []

    def visit(self, node: PageElement) -> None:
        if isinstance(node, Tag):
            self._visit_tag(node)
        elif isinstance(node, NavigableString) and not isinstance(
            node, PreformattedString
        ):
            text = str(node)
            self._chunks.append(text)
            self._length += len(text)

    def _visit_tag(self, tag: Tag) -> None:
        offset = self._length
        slot = len(self._slots)
        self._slots.append(None)
        for child in tag.children:
            self.visit(child)
        content_length = self._length - offset
        if content_length > 0:
            self._slots[slot] = _entity_for(tag, offset, content_length)

    def result(self) -> RichText:
        raw = "".join(self._chunks)
        plain_text = raw.strip()
        leading = len(raw) - len(raw.lstrip())
        end = len(plain_text)

        entities: list[MessageEntity] = []
        for entity in self._slots:
            if entity is None:
                continue
            start = max(entity.offset - leading, 0)
            stop = min(entity.offset + entity.length - leading, end)
            if stop <= start:
                continue
            if start != entity.offset or stop - start != entity.length:
                entity = entity.model_copy(
                    update={"offset": start, "length": stop - start}
                )
            entities.append(entity)

        # list.sort is stable, so equal offsets keep document order.
        entities.sort(key=attrgetter("offset"))
        return RichText(plain_text=plain_text, entities=entities)


def _entity_for(tag: Tag, offset: int, length: int) -> MessageEntity | None:
    entity_type = _TAG_ENTITY_TYPES.get(tag.name)
    if entity_type is None:
        return None

    if entity_type is EntityType.CODE:
        return MessageEntity(
            type=entity_type,
            offset=offset,
            length=length,
            language=tag.get("lang") or "",
        )
    if entity_type is EntityType.PRE:
        return MessageEntity(type=entity_type, offset=offset, length=length, language="")
    if entity_type is EntityType.TEXT_LINK:
        href = tag.get("href")
        if not href:
            return None
        return MessageEntity(type=entity_type, offset=offset, length=length, url=href)
    return MessageEntity(type=entity_type, offset=offset, length=length)
