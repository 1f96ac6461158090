"""Configuration for the PDFDancer docs MCP server.

Every value is read from the environment exactly once, at startup, and
frozen into a :class:`Settings` instance that is handed to
:func:`pdfdancer_mcp.mcp_server.create_server`.  Nothing else in the
package reads ``os.environ``.

Environment variables:

``PDFDANCER_DOCS_BASE_URL``
    Base URL of the documentation search service.  Every outbound path
    (``/search``, ``/content`` ...) is resolved against it.
``PDFDANCER_MCP_TRANSPORT``
    ``stdio`` (default), ``streamable-http`` or ``sse``.
``PDFDANCER_MCP_HOST`` / ``MCP_PORT`` / ``PORT``
    Bind address for the HTTP transports.
``PDFDANCER_MCP_LOG_LEVEL``
    Root log level, ``INFO`` by default.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

#: Public search worker that indexes the PDFDancer Docusaurus site.
DEFAULT_BASE_URL = (
    "https://docusaurus-cloudflare-search.michael-lahr-0b0.workers.dev/"
)

#: Environment variables consulted for the base URL, highest priority first.
BASE_URL_ENV_VARS: Tuple[str, ...] = ("PDFDANCER_DOCS_BASE_URL",)

TRANSPORTS: Tuple[str, ...] = ("stdio", "streamable-http", "sse")
DEFAULT_TRANSPORT = "stdio"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Immutable server configuration, resolved once at startup."""

    base_url: str = DEFAULT_BASE_URL
    transport: str = DEFAULT_TRANSPORT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL


def _first_set(environ: Mapping[str, str], names: Tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def resolve_base_url(environ: Mapping[str, str]) -> str:
    """Return the normalised documentation base URL.

    The result always ends with ``/`` so that relative paths keep any
    prefix the base carries.  Raises :class:`ConfigurationError` when the
    value is not an absolute http(s) URL.
    """
    value = _first_set(environ, BASE_URL_ENV_VARS) or DEFAULT_BASE_URL
    hint = " or ".join(BASE_URL_ENV_VARS)
    try:
        parts = urlsplit(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid documentation base URL {value!r} ({exc}). "
            f"Set {hint} to an absolute http(s) URL."
        ) from exc

    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(
            f"Invalid documentation base URL {value!r}. "
            f"Set {hint} to an absolute http(s) URL."
        )

    path = parts.path if parts.path.endswith("/") else parts.path + "/"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from the environment (``os.environ`` by default)."""
    if environ is None:
        environ = os.environ

    transport = (environ.get("PDFDANCER_MCP_TRANSPORT") or DEFAULT_TRANSPORT).strip()
    if transport not in TRANSPORTS:
        raise ConfigurationError(
            f"Unsupported transport {transport!r} in PDFDANCER_MCP_TRANSPORT; "
            f"expected one of {', '.join(TRANSPORTS)}."
        )

    raw_port = _first_set(environ, ("MCP_PORT", "PORT")) or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid port {raw_port!r} in MCP_PORT/PORT."
        ) from exc

    log_level = (
        environ.get("PDFDANCER_MCP_LOG_LEVEL") or DEFAULT_LOG_LEVEL
    ).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(
            f"Unknown log level {log_level!r} in PDFDANCER_MCP_LOG_LEVEL."
        )

    return Settings(
        base_url=resolve_base_url(environ),
        transport=transport,
        host=(environ.get("PDFDANCER_MCP_HOST") or DEFAULT_HOST).strip(),
        port=port,
        log_level=log_level,
    )
