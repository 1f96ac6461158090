"""End-to-end tests for the FastMCP server.

A real fastmcp ``Client`` talks to the server in memory, so these tests
cover the full path: tool listing, argument validation, dispatch, HTTP
(against FakeDocsService) and the conversion of failures into tool-level
error results.  They verify:

- Every declared tool is listed with its input schema
- Successful calls return text blocks plus structured content
- Validation, HTTP and parse failures come back as ``isError`` results
- Unknown tool names are reported as not found
- Invalid configuration stops ``main()`` with exit status 1
"""

from unittest.mock import patch

import pytest
from fastmcp import Client

import pdfdancer_mcp.mcp_server as mod
from pdfdancer_mcp.config import Settings
from pdfdancer_mcp.mcp_server import create_server

from tests.conftest import BASE_URL, FakeDocsService


@pytest.fixture()
def server(settings, docs_service):
    return create_server(settings, http_transport=docs_service.transport, version="9.9.9")


async def call(server, name, arguments=None):
    async with Client(server) as client:
        return await client.call_tool_mcp(name, arguments or {})


def first_text(result):
    assert result.content[0].type == "text"
    return result.content[0].text


@pytest.mark.asyncio
class TestToolListing:

    async def test_lists_every_tool(self, server):
        async with Client(server) as client:
            tools = await client.list_tools()
        names = {tool.name for tool in tools}
        assert names == {
            "help",
            "version",
            "search-docs",
            "get-docs",
            "list-indexes",
            "list-routes",
            "service-info",
        }

    async def test_input_schemas_are_published(self, server):
        async with Client(server) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}
        search_schema = tools["search-docs"].inputSchema
        assert search_schema["required"] == ["query"]
        assert "maxResults" in search_schema["properties"]
        assert tools["get-docs"].inputSchema["required"] == ["route"]

    async def test_tools_are_annotated_read_only(self, server):
        async with Client(server) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}
        assert tools["search-docs"].annotations.readOnlyHint is True
        assert tools["help"].annotations.openWorldHint is False


@pytest.mark.asyncio
class TestSuccessfulCalls:

    async def test_help(self, server):
        result = await call(server, "help")
        assert not result.isError
        assert "PDFDancer SDK Documentation" in first_text(result)
        assert "Available MCP Tools" in first_text(result)
        assert result.structuredContent is not None

    async def test_help_and_version_are_stable(self, server):
        for name in ("help", "version"):
            first = await call(server, name)
            second = await call(server, name)
            assert first_text(first) == first_text(second)

    async def test_version(self, server):
        result = await call(server, "version")
        assert first_text(result) == "pdfdancer-mcp version: 9.9.9"
        assert result.structuredContent == {"version": "9.9.9"}

    async def test_search_docs(self, server, docs_service, search_response):
        result = await call(server, "search-docs", {"query": "paragraph", "maxResults": 3})
        assert not result.isError
        assert 'result(s) for "paragraph"' in first_text(result)
        assert result.structuredContent["query"] == search_response["query"]
        assert docs_service.last_request.url.params["maxResults"] == "3"

    async def test_get_docs(self, server, content_response):
        result = await call(server, "get-docs", {"route": "/docs/intro"})
        assert not result.isError
        assert len(result.content) == 2
        assert result.content[1].text == content_response["content"]
        assert result.structuredContent["route"] == "/docs/intro"

    async def test_list_routes(self, server):
        result = await call(server, "list-routes")
        assert result.structuredContent == {"items": ["/docs/intro", "/docs/getting-started"]}


@pytest.mark.asyncio
class TestErrorResults:

    async def test_unknown_tool(self, server):
        result = await call(server, "does-not-exist")
        assert result.isError
        assert "does-not-exist" in first_text(result)
        assert "not found" in first_text(result)

    async def test_missing_required_argument(self, server, docs_service):
        result = await call(server, "search-docs", {})
        assert result.isError
        assert "query" in first_text(result)
        assert docs_service.requests == []

    async def test_wrong_argument_type(self, server, docs_service):
        result = await call(server, "search-docs", {"query": "x", "maxResults": "invalid"})
        assert result.isError
        assert "maxResults: Input should be a valid integer" in first_text(result)
        assert docs_service.requests == []

    async def test_integral_float_max_results(self, server, docs_service):
        result = await call(server, "search-docs", {"query": "x", "maxResults": 3.0})
        assert not result.isError
        assert docs_service.last_request.url.params["maxResults"] == "3"

    async def test_malformed_search_results_are_a_tool_error(self, settings):
        service = FakeDocsService(
            {("GET", "/search"): (200, {"results": ["intro"], "query": "x"})}
        )
        server = create_server(settings, http_transport=service.transport)

        result = await call(server, "search-docs", {"query": "x"})
        assert result.isError
        assert (
            "Unexpected response from http://docs.test/search?q=x: "
            "expected results to be a list of objects"
        ) in first_text(result)

    @pytest.mark.parametrize("value", [0, 11])
    async def test_max_results_out_of_range(self, server, docs_service, value):
        result = await call(server, "search-docs", {"query": "x", "maxResults": value})
        assert result.isError
        assert docs_service.requests == []

    async def test_route_without_leading_slash(self, server, docs_service):
        result = await call(server, "get-docs", {"route": "invalid-route"})
        assert result.isError
        assert "route must start with /" in first_text(result)
        assert docs_service.requests == []

    async def test_http_error_is_a_tool_error(self, settings):
        service = FakeDocsService({("GET", "/search"): (500, "boom")})
        server = create_server(settings, http_transport=service.transport)

        result = await call(server, "search-docs", {"query": "x"})
        assert result.isError
        text = first_text(result)
        assert "http://docs.test/search?q=x" in text
        assert "500" in text
        assert "boom" in text

    async def test_parse_error_is_a_tool_error(self, settings):
        service = FakeDocsService({("GET", "/indexes"): (200, "{not json")})
        server = create_server(settings, http_transport=service.transport)

        result = await call(server, "list-indexes")
        assert result.isError
        assert "Failed to parse JSON response from http://docs.test/indexes" in first_text(result)

    async def test_server_keeps_serving_after_errors(self, server):
        async with Client(server) as client:
            bad = await client.call_tool_mcp("get-docs", {"route": "nope"})
            good = await client.call_tool_mcp("version", {})
        assert bad.isError
        assert not good.isError


class TestMain:

    def test_invalid_base_url_exits_with_status_1(self, monkeypatch):
        monkeypatch.setenv("PDFDANCER_DOCS_BASE_URL", "not a url")
        with patch.object(mod, "create_server") as mock_create:
            with pytest.raises(SystemExit) as excinfo:
                mod.main()
        assert excinfo.value.code == 1
        mock_create.assert_not_called()

    def test_stdio_transport(self):
        with patch.object(mod, "create_server") as mock_create:
            mod.main()
        settings = mock_create.call_args[0][0]
        assert settings == Settings(base_url=BASE_URL)
        mock_create.return_value.run.assert_called_once_with(transport="stdio")

    def test_http_transport(self, monkeypatch):
        monkeypatch.setenv("PDFDANCER_MCP_TRANSPORT", "streamable-http")
        monkeypatch.setenv("MCP_PORT", "9000")
        with patch.object(mod, "create_server") as mock_create:
            mod.main()
        mock_create.return_value.run.assert_called_once_with(
            transport="streamable-http", host="127.0.0.1", port=9000
        )

    def test_keyboard_interrupt_is_a_clean_shutdown(self):
        with patch.object(mod, "create_server") as mock_create:
            mock_create.return_value.run.side_effect = KeyboardInterrupt
            mod.main()
