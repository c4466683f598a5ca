"""FastAPI application serving a relay's inbound webhooks.

Routes, all under the path of the relay's base URL:

* ``POST /<adaptor_id>``: one per subscriber; the request is handed to the
  adaptor's ``receive`` and the resulting messages are dispatched.
* ``GET /ping``: liveness probe.
* ``GET /``: welcome page.

Webhook callers get ``200 {"status": "ok"}`` once every message of the
request has been relayed, or ``500`` if receiving or dispatching raised.
Nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from syncrelay.adaptors import SubscribableAdaptor
from syncrelay.relay import SyncRelay
from syncrelay.urls import base_path

logger = logging.getLogger(__name__)


def create_app(relay: SyncRelay) -> FastAPI:
    """Build the webhook app for *relay*.

    Subscribers registered later (still during setup) get their route as
    soon as they are registered.  The app's lifespan start-up puts the relay
    into its serving phase.
    """
    prefix = base_path(relay.url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await relay.start()
        yield

    app = FastAPI(title="syncrelay", lifespan=lifespan)
    app.state.relay = relay

    @app.get(f"{prefix}/ping", response_class=PlainTextResponse)
    async def ping() -> str:
        return "pong"

    @app.get(prefix or "/", response_class=HTMLResponse)
    async def index() -> str:
        return "<h1>Welcome to SyncRelay</h1>"

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse({"error": "Not Found"}, status_code=404)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    def bind(adaptor: SubscribableAdaptor) -> None:
        adaptor_id = adaptor.id

        async def webhook(request: Request) -> JSONResponse:
            try:
                await relay.receive(adaptor_id, request)
            except Exception:
                logger.exception("Error processing webhook for %s", adaptor_id)
                return JSONResponse(
                    {"error": "Failed to process webhook"}, status_code=500
                )
            return JSONResponse({"status": "ok", "message": "Request processed"})

        app.add_api_route(
            f"{prefix}/{adaptor_id}",
            webhook,
            methods=["POST"],
            name=f"webhook:{adaptor_id}",
        )
        logger.debug("Bound webhook route %s/%s", prefix, adaptor_id)

    relay.registry.on_subscribe(bind)
    return app
