"""
Shared fixtures for the pdfdancer-mcp test suite

The documentation service is replaced by FakeDocsService, an
httpx.MockTransport handler that records every request, so no test ever
reaches the real search worker
"""

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from pdfdancer_mcp.api import DocsApiClient
from pdfdancer_mcp.config import Settings

BASE_URL = "http://docs.test/"


# Environment variables

@pytest.fixture(autouse=True)
def env_vars(monkeypatch):
    """Pin every environment variable the server reads

    autouse=True ensures no test accidentally picks up a developer's own
    base URL or transport settings
    """
    env = {
        "PDFDANCER_DOCS_BASE_URL": BASE_URL,
        "PDFDANCER_MCP_TRANSPORT": "stdio",
        "PDFDANCER_MCP_LOG_LEVEL": "INFO",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    for key in ("PDFDANCER_MCP_HOST", "MCP_PORT", "PORT"):
        monkeypatch.delenv(key, raising=False)
    return env


# Fake documentation service

Reply = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeDocsService:
    """Routes (method, path) to canned replies and records each request

    A reply is either a (status, body) tuple, where a str body is sent
    verbatim and anything else as JSON, or a callable taking the request
    """

    def __init__(self, routes: Dict[Tuple[str, str], Reply] = None):
        self.routes: Dict[Tuple[str, str], Reply] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, text=f"no route for {request.url.path}")
        if callable(reply):
            return reply(request)
        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


def make_result(i, score=None, **fields):
    """Build a single search hit in the shape the service returns"""
    result = {
        "id": i,
        "pageTitle": f"Page {i}",
        "sectionTitle": f"Section {i}",
        "sectionRoute": f"/docs/page-{i}#section-{i}",
        "sectionContent": f"Content of section {i}.",
        "type": "section",
    }
    if score is not None:
        result["score"] = score
    result.update(fields)
    return result


@pytest.fixture()
def search_response():
    """Seven ranked hits, more than the summary shows"""
    return {
        "results": [make_result(i, score=1.0 / i) for i in range(1, 8)],
        "total": 7,
        "query": "paragraph",
        "took": 42,
    }


@pytest.fixture()
def content_response():
    return {
        "route": "/docs/intro",
        "content": "# Introduction\n\nPDFDancer lets you edit existing PDFs.",
        "metadata": {"title": "Introduction"},
    }


@pytest.fixture()
def docs_service(search_response, content_response):
    """A fake service that answers every endpoint successfully"""
    return FakeDocsService(
        {
            ("GET", "/"): (200, {"name": "docusaurus-search", "version": "2.0.0"}),
            ("GET", "/search"): (200, search_response),
            ("POST", "/search"): (200, search_response),
            ("GET", "/indexes"): (200, {"indexes": ["python", "java", "typescript"]}),
            ("GET", "/list-content"): (200, ["/docs/intro", "/docs/getting-started"]),
            ("GET", "/content"): (200, content_response),
        }
    )


@pytest.fixture()
def api_client(docs_service):
    return DocsApiClient(BASE_URL, transport=docs_service.transport)


@pytest.fixture()
def settings():
    return Settings(base_url=BASE_URL)
