"""``syncrelay serve TARGET`` — run a relay's webhook app with uvicorn.

TARGET is ``module:attribute`` naming either a configured ``SyncRelay`` or
a zero-argument factory returning one.
"""

from __future__ import annotations

import importlib
import logging
from urllib.parse import urlsplit

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from syncrelay.config import RelaySettings
from syncrelay.errors import RelayError
from syncrelay.relay import SyncRelay
from syncrelay.webhook import create_app

console = Console()


def configure_logging(level: str) -> None:
    """Route all logging through a Rich handler at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def load_relay(target: str) -> SyncRelay:
    """Import ``module:attribute`` and return the relay it names.

    Raises
    ------
    typer.BadParameter
        If the target is malformed or does not yield a ``SyncRelay``.
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Expected 'module:attribute', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import {module_name!r}: {exc}") from exc
    try:
        obj = getattr(module, attribute)
    except AttributeError as exc:
        raise typer.BadParameter(
            f"Module {module_name!r} has no attribute {attribute!r}"
        ) from exc

    if not isinstance(obj, SyncRelay) and callable(obj):
        obj = obj()
    if not isinstance(obj, SyncRelay):
        raise typer.BadParameter(
            f"{target!r} is a {type(obj).__name__}, expected a SyncRelay"
        )
    return obj


def default_port(base_url: str) -> int:
    parts = urlsplit(base_url)
    if parts.port:
        return parts.port
    return 443 if parts.scheme == "https" else 80


def serve_cmd(
    target: str = typer.Argument(
        ..., help="'module:attribute' naming a SyncRelay or a factory returning one."
    ),
    host: str = typer.Option(None, "--host", help="Interface to bind."),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind."),
) -> None:
    """Serve the relay's webhooks until interrupted."""
    settings = RelaySettings()
    configure_logging(settings.log_level)

    try:
        relay = load_relay(target)
    except RelayError as exc:
        console.print(f"[bold red]Invalid relay configuration:[/bold red] {exc}")
        raise typer.Exit(code=1)

    bind_host = host or settings.host
    bind_port = port or settings.port or default_port(relay.url)
    console.print(
        f"Webhook server for [cyan]{relay.url}[/cyan] listening on "
        f"{bind_host}:{bind_port}"
    )
    uvicorn.run(create_app(relay), host=bind_host, port=bind_port, log_config=None)
