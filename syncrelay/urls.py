"""Base URL validation and webhook URL construction."""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from syncrelay.core.registry import validate_adaptor_id
from syncrelay.errors import ConfigurationError

_HOST_LABEL = re.compile(r"^[A-Za-z0-9-]+$")


def _is_valid_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    labels = host.split(".")
    return len(labels) >= 2 and all(_HOST_LABEL.match(label) for label in labels)


def normalize_base_url(url: str) -> str:
    """Validate and normalize the relay's public base URL.

    A bare host (``"example.com"``, ``"localhost:8080"``) is assumed to be
    https.  Trailing slashes are removed from the path; query string and
    fragment are dropped.

    Raises
    ------
    ConfigurationError
        If the scheme is not http/https, the host is missing or malformed,
        or the port is not a number.

    Examples
    --------
    >>> normalize_base_url("example.com/bot/")
    'https://example.com/bot'
    """
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError("A base URL must be provided.")

    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parts = urlsplit(candidate)
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise ConfigurationError(
            f'Invalid protocol "{parts.scheme}:". Only http and https are supported.'
        )

    host = parts.hostname
    if not host or not _is_valid_host(host):
        raise ConfigurationError(f"Invalid host in base URL: {url!r}")

    try:
        parts.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in base URL: {url!r}") from exc

    return urlunsplit((scheme, parts.netloc, parts.path.rstrip("/"), "", ""))


def base_path(url: str) -> str:
    """Path component of a normalized base URL, without trailing slash."""
    return urlsplit(url).path.rstrip("/")


def build_webhook_url(base_url: str, adaptor_id: str) -> str:
    """Resolve *adaptor_id* against *base_url* (with a guaranteed trailing slash).

    Examples
    --------
    >>> build_webhook_url("https://example.com/bot", "telegram")
    'https://example.com/bot/telegram'
    """
    validate_adaptor_id(adaptor_id)
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return urljoin(base, adaptor_id)
