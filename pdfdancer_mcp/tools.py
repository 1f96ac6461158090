"""Tool declarations and dispatch.

Each tool is a :class:`ToolSpec`: a unique name, the description the
calling agent reads to decide when to use it, a pydantic model that is
both the published input schema and the validator, and an async handler.
The set is closed and built once by :func:`build_registry`.

Dispatch always runs in the same order::

    look up name  →  validate arguments  →  handler (0 or 1 HTTP call)
        →  ToolResult(text blocks, structured content)

Unknown names raise :class:`DispatchError`, bad arguments raise
:class:`ArgumentValidationError` before the handler runs, and the handler
itself may raise :class:`ApiError`, :class:`ParseError` or
:class:`UnexpectedResponseError`.  The MCP layer turns all of them into
tool-level error results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Annotated,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Literal,
    Optional,
    Type,
)

from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    WithJsonSchema,
    field_validator,
)

from .api import DocsApiClient
from .errors import ArgumentValidationError, DispatchError
from .formatting import format_json_block, summarize_search_response
from .help_content import help_payload, render_help, version_text

logger = logging.getLogger(__name__)

#: Upper bound for ``search-docs`` ``maxResults``.
MAX_RESULTS_CAP = 10


# ---------------------------------------------------------------------------
# Argument schemas
# ---------------------------------------------------------------------------


class _Arguments(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=True)


class NoArguments(_Arguments):
    """Tools that take no arguments."""


class SearchDocsArguments(_Arguments):
    query: str = Field(
        ...,
        min_length=1,
        description=(
            "Search terms. Lunr syntax is supported: +required, -excluded, "
            "prefix*, title:term."
        ),
    )
    # Published as a plain bounded integer; omitting the key means "unset".
    max_results: Annotated[
        Optional[Annotated[int, Field(ge=1, le=MAX_RESULTS_CAP)]],
        WithJsonSchema(
            {"type": "integer", "minimum": 1, "maximum": MAX_RESULTS_CAP}
        ),
    ] = Field(
        default=None,
        alias="maxResults",
        description=f"Maximum number of results (1-{MAX_RESULTS_CAP}).",
    )
    tag: Optional[str] = Field(
        default=None,
        description="Restrict the search to one index tag (see list-indexes).",
    )
    method: Literal["get", "post"] = Field(
        default="get",
        description="Send the search as a GET query string or a POST JSON body.",
    )

    @field_validator("max_results", mode="before")
    @classmethod
    def _integral_float_to_int(cls, value: Any) -> Any:
        # JSON clients may send 3.0 for the integer 3
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class GetDocsArguments(_Arguments):
    route: str = Field(
        ...,
        description="Documentation route starting with /, e.g. /docs/intro.",
    )

    @field_validator("route")
    @classmethod
    def _route_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("route must start with /")
        return value


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

Handler = Callable[[Any], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    title: str
    description: str
    arguments: Type[BaseModel]
    handler: Handler
    open_world: bool = True

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema(by_alias=True)


def _describe_problem(error: Dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
    return f"{field}: {error.get('msg', 'invalid value')}"


class ToolRegistry:
    """Name → :class:`ToolSpec` lookup with validation and dispatch."""

    def __init__(self, specs: List[ToolSpec]) -> None:
        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._specs[spec.name] = spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def names(self) -> List[str]:
        return list(self._specs)

    def get(self, name: str) -> ToolSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise DispatchError(name) from None

    def validate(self, name: str, arguments: Optional[Dict[str, Any]]) -> BaseModel:
        spec = self.get(name)
        try:
            return spec.arguments.model_validate(arguments or {})
        except ValidationError as exc:
            problems = [_describe_problem(error) for error in exc.errors()]
            raise ArgumentValidationError(name, problems) from exc

    async def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        spec = self.get(name)
        args = self.validate(name, arguments)
        logger.info(
            "%s called with: %s",
            name,
            args.model_dump(by_alias=True, exclude_none=True),
        )
        return await spec.handler(args)


# ---------------------------------------------------------------------------
# Result helpers
# ---------------------------------------------------------------------------


def _structured(payload: Any) -> Dict[str, Any]:
    """Structured content must be a JSON object."""
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, list):
        return {"items": payload}
    return {"value": payload}


def _result(texts: List[str], payload: Any) -> ToolResult:
    return ToolResult(
        content=[TextContent(type="text", text=text) for text in texts],
        structured_content=_structured(payload),
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


class DocsToolHandlers:
    """Handlers bound to one API client and one server version."""

    def __init__(self, client: DocsApiClient, version: str) -> None:
        self._client = client
        self._version = version

    async def help(self, args: NoArguments) -> ToolResult:
        return _result([render_help()], help_payload())

    async def version(self, args: NoArguments) -> ToolResult:
        return _result([version_text(self._version)], {"version": self._version})

    async def service_info(self, args: NoArguments) -> ToolResult:
        data = await self._client.service_info()
        return _result([format_json_block("Documentation service", data)], data)

    async def search_docs(self, args: SearchDocsArguments) -> ToolResult:
        data = await self._client.search(
            args.query,
            tag=args.tag,
            max_results=args.max_results,
            method=args.method,
        )
        text = "\n\n".join(
            [
                summarize_search_response(data),
                format_json_block("Raw search response", data),
            ]
        )
        return _result([text], data)

    async def get_docs(self, args: GetDocsArguments) -> ToolResult:
        data = await self._client.get_content(args.route)
        content = data.get("content")
        return _result(
            [
                format_json_block(f"Documentation for {args.route}", data),
                content if isinstance(content, str) else "",
            ],
            data,
        )

    async def list_indexes(self, args: NoArguments) -> ToolResult:
        data = await self._client.list_indexes()
        return _result([format_json_block("Available indexes", data)], data)

    async def list_routes(self, args: NoArguments) -> ToolResult:
        data = await self._client.list_content()
        return _result([format_json_block("Stored documentation routes", data)], data)


def build_registry(client: DocsApiClient, version: str) -> ToolRegistry:
    """Declare every tool the server exposes."""
    handlers = DocsToolHandlers(client, version)
    return ToolRegistry(
        [
            ToolSpec(
                name="help",
                title="PDFDancer docs help",
                description=(
                    "Explain what this server offers, the available tools, "
                    "search syntax tips and the recommended workflow. Call it "
                    "first when unsure how to look something up."
                ),
                arguments=NoArguments,
                handler=handlers.help,
                open_world=False,
            ),
            ToolSpec(
                name="version",
                title="Server version",
                description="Return the pdfdancer-mcp version that is running.",
                arguments=NoArguments,
                handler=handlers.version,
                open_world=False,
            ),
            ToolSpec(
                name="search-docs",
                title="Search PDFDancer documentation",
                description=(
                    "Search the PDFDancer SDK documentation by keyword. Returns "
                    "the top matches with their routes; pass a route to get-docs "
                    "to read the full page."
                ),
                arguments=SearchDocsArguments,
                handler=handlers.search_docs,
            ),
            ToolSpec(
                name="get-docs",
                title="Read a documentation page",
                description=(
                    "Fetch the markdown content stored for one documentation "
                    "route (a sectionRoute from search-docs, starting with /)."
                ),
                arguments=GetDocsArguments,
                handler=handlers.get_docs,
            ),
            ToolSpec(
                name="list-indexes",
                title="List search indexes",
                description="List the index tags available to search-docs.",
                arguments=NoArguments,
                handler=handlers.list_indexes,
            ),
            ToolSpec(
                name="list-routes",
                title="List documentation routes",
                description="List every documentation route stored by the service.",
                arguments=NoArguments,
                handler=handlers.list_routes,
            ),
            ToolSpec(
                name="service-info",
                title="Documentation service info",
                description="Show the metadata the documentation service reports about itself.",
                arguments=NoArguments,
                handler=handlers.service_info,
            ),
        ]
    )
