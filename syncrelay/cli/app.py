"""Main Typer application — imports and registers all CLI commands.

Entry point: ``syncrelay`` (configured via pyproject.toml console scripts).
"""

from __future__ import annotations

import typer
from rich.console import Console

from syncrelay import __version__
from syncrelay.cli.commands.render import render_cmd
from syncrelay.cli.commands.serve import serve_cmd
from syncrelay.errors import ConfigurationError, ValidationError
from syncrelay.urls import build_webhook_url, normalize_base_url

app = typer.Typer(
    name="syncrelay",
    help="syncrelay: relay messages between chat platforms.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()

# Register subcommands
app.command(name="serve", help="Serve a relay's webhooks with uvicorn.")(serve_cmd)
app.command(name="render", help="Preview content conversion and entities.")(render_cmd)


@app.command(name="webhook-url", help="Print the webhook URL for an adaptor.")
def webhook_url_cmd(
    base_url: str = typer.Argument(..., help="Public base URL of the relay."),
    adaptor_id: str = typer.Argument(..., help="Subscriber adaptor id."),
) -> None:
    """Print the callback URL a subscriber registers with its platform."""
    try:
        url = build_webhook_url(normalize_base_url(base_url), adaptor_id)
    except (ConfigurationError, ValidationError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(url, markup=False, highlight=False)


@app.command(name="version", help="Show the installed syncrelay version.")
def version_cmd() -> None:
    console.print(f"syncrelay {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
