"""``syncrelay render TEXT`` — preview how content is converted for publishers.

Shows the HTML, Markdown and plain-text derivations of the given text and
the entity list an offset-based publisher would receive.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from syncrelay.content import Content, ContentFormat
from syncrelay.errors import ConversionError

console = Console()


def render_cmd(
    text: str = typer.Argument(..., help="Raw text to convert."),
    fmt: ContentFormat = typer.Option(
        ContentFormat.MARKDOWN,
        "--format",
        "-f",
        case_sensitive=False,
        help="Format the text is written in.",
    ),
) -> None:
    """Print every derived representation of TEXT and its entities."""
    content = Content(text, fmt)
    try:
        html = content.to_html()
        markdown = content.to_markdown()
        rich_text = content.to_message_entities()
    except ConversionError as exc:
        console.print(f"[bold red]Conversion failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(Panel(Text(html), title="HTML", expand=False))
    console.print(Panel(Text(markdown), title="Markdown", expand=False))
    console.print(Panel(Text(rich_text.plain_text), title="Plain text", expand=False))

    if not rich_text.entities:
        console.print("[dim]No entities.[/dim]")
        return

    table = Table(title="Entities")
    table.add_column("Type", style="cyan")
    table.add_column("Offset", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Text", style="green")
    table.add_column("Extra")
    for entity in rich_text.entities:
        span = rich_text.plain_text[entity.offset : entity.offset + entity.length]
        extra = entity.url or (f"lang={entity.language}" if entity.language else "")
        table.add_row(
            entity.type.value,
            str(entity.offset),
            str(entity.length),
            Text(span),
            Text(extra),
        )
    console.print(table)
