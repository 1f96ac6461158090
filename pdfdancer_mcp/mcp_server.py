"""FastMCP binding and entry point for the PDFDancer docs server.

Every :class:`~pdfdancer_mcp.tools.ToolSpec` in the registry is exposed as
a FastMCP tool whose input schema is its argument model.  Calls
flow through::

    FastMCP  →  ToolCallMiddleware (unknown name? log)  →  RegistryTool.run
        →  ToolRegistry.call  →  ToolResult

Per-call failures (bad arguments, HTTP errors, unparseable bodies) become
tool-level error results; the process keeps serving.  Only configuration
errors stop the server, and they do so before it starts.

Usage (stdio, as launched by an MCP client)::

    pdfdancer-mcp
    python -m pdfdancer_mcp

Usage (HTTP)::

    PDFDANCER_MCP_TRANSPORT=streamable-http MCP_PORT=8000 pdfdancer-mcp
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import ToolAnnotations
from pydantic import PrivateAttr

from . import package_version
from .api import DocsApiClient
from .config import Settings, load_settings
from .errors import ConfigurationError, DispatchError, DocsServerError
from .help_content import SERVER_NAME
from .tools import ToolRegistry, ToolSpec, build_registry

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
# stdout carries the MCP stream on the stdio transport, so logs go to stderr.

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Documentation tools for the PDFDancer PDF editing SDK. Use search-docs "
    "to find relevant pages, then get-docs with a returned route to read the "
    "full markdown. Call help for search syntax and workflow tips."
)


# ---------------------------------------------------------------------------
# FastMCP adapters
# ---------------------------------------------------------------------------


class RegistryTool(Tool):
    """A FastMCP tool that delegates to a :class:`ToolRegistry` entry."""

    _registry: ToolRegistry = PrivateAttr()

    @classmethod
    def from_spec(cls, spec: ToolSpec, registry: ToolRegistry) -> "RegistryTool":
        tool = cls(
            name=spec.name,
            description=spec.description,
            parameters=spec.input_schema,
            annotations=ToolAnnotations(
                title=spec.title,
                readOnlyHint=True,
                openWorldHint=spec.open_world,
            ),
        )
        tool._registry = registry
        return tool

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        try:
            return await self._registry.call(self.name, arguments)
        except DocsServerError as exc:
            logger.warning("%s failed: %s", self.name, exc)
            raise ToolError(str(exc)) from exc


class ToolCallMiddleware(Middleware):
    """Reject names outside the registry before FastMCP looks them up."""

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = context.message.name
        if name not in self._registry:
            logger.warning("Call to unknown tool %r", name)
            raise ToolError(str(DispatchError(name)))
        return await call_next(context)


def create_server(
    settings: Settings,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
    version: Optional[str] = None,
) -> FastMCP:
    """Build the FastMCP server for ``settings``.

    ``http_transport`` replaces the network layer of the API client; tests
    pass an ``httpx.MockTransport``.
    """
    version = version or package_version()
    client = DocsApiClient(settings.base_url, transport=http_transport)
    registry = build_registry(client, version)

    mcp = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        version=version,
        middleware=[ToolCallMiddleware(registry)],
    )
    for spec in registry:
        mcp.add_tool(RegistryTool.from_spec(spec, registry))

    logger.info(
        "Registered %d tools against %s: %s",
        len(registry),
        settings.base_url,
        ", ".join(registry.names()),
    )
    return mcp


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    mcp = create_server(settings)

    logger.info(
        "Starting %s %s (%s transport, docs at %s)",
        SERVER_NAME,
        package_version(),
        settings.transport,
        settings.base_url,
    )
    try:
        if settings.transport == "stdio":
            mcp.run(transport="stdio")
        else:
            mcp.run(
                transport=settings.transport,
                host=settings.host,
                port=settings.port,
            )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
