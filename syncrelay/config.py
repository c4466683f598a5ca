"""Runtime configuration — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``SYNCRELAY_*`` environment variables.

Examples
--------
Override via environment::

    export SYNCRELAY_BASE_URL=https://relay.example.com/hooks
    export SYNCRELAY_STEP_TIMEOUT_SECONDS=10
    export SYNCRELAY_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Relay settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SYNCRELAY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Public URL webhooks are served under; adaptor ids are appended to it.
    base_url: str = "http://localhost:8080"

    # Per processor action / send call.  None disables the timeout.
    step_timeout_seconds: float | None = Field(default=30.0, gt=0)

    # Listening socket for ``syncrelay serve``; port defaults to the base URL's.
    host: str = "0.0.0.0"
    port: int | None = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Module-level singleton; import as `from syncrelay.config import config`
config = RelaySettings()
