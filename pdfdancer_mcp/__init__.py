"""MCP server for the PDFDancer SDK documentation.

The server is a thin translation layer between an AI coding assistant and
the PDFDancer documentation search service::

    Assistant ──► MCP tool call ──► ToolRegistry (validate arguments)
                                        │
                                        ├──► help / version   (static)
                                        │
                                        └──► DocsApiClient ──► GET|POST /search
                                                              GET /content
                                                              GET /indexes
                                                              GET /list-content
                                                              GET /

Each tool returns a human-readable text block together with the raw JSON
as structured content.

Tools:
    help          – static usage guide
    version       – installed package version
    search-docs   – keyword search (GET or POST)
    get-docs      – markdown body for one route
    list-indexes  – available index tags
    list-routes   – stored documentation routes
    service-info  – service metadata
"""

from importlib.metadata import PackageNotFoundError, version as _dist_version

DISTRIBUTION_NAME = "pdfdancer-mcp"


def package_version() -> str:
    """Version of the installed distribution, ``0.0.0`` when not installed."""
    try:
        return _dist_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"
