"""Exception hierarchy for the PDFDancer docs MCP server.

Only :class:`ConfigurationError` is fatal (raised at startup, before any
tool is served).  Everything else is raised per tool call and converted
into a tool-level error result at the dispatch boundary in
:mod:`pdfdancer_mcp.mcp_server`.
"""

from typing import List, Optional


class DocsServerError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(DocsServerError):
    """The server cannot start with the given environment."""


class ApiError(DocsServerError):
    """The documentation service answered with a non-success status,
    or could not be reached at all (``status`` is ``None`` then)."""

    def __init__(self, url: str, status: Optional[int], detail: str) -> None:
        self.url = url
        self.status = status
        self.detail = detail
        if status is None:
            message = f"Request to {url} failed: {detail}"
        else:
            message = f"Request to {url} failed with status {status}: {detail}"
        super().__init__(message)


class ParseError(DocsServerError):
    """The response body was not empty but was not valid JSON either."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Failed to parse JSON response from {url}: {detail}")


class UnexpectedResponseError(DocsServerError):
    """The response decoded fine but is not the document a tool needs."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Unexpected response from {url}: {detail}")


class DispatchError(DocsServerError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool {tool_name} not found")


class ArgumentValidationError(DocsServerError):
    """Tool arguments failed the declared schema."""

    def __init__(self, tool_name: str, problems: List[str]) -> None:
        self.tool_name = tool_name
        self.problems = list(problems)
        super().__init__(
            f"Invalid arguments for tool {tool_name}: " + "; ".join(self.problems)
        )
