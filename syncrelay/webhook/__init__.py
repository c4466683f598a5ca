"""FastAPI webhook transport — binds one inbound route per subscriber."""

from syncrelay.webhook.app import create_app

__all__ = ["create_app"]
