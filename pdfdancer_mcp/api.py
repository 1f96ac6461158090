"""HTTP client for the PDFDancer documentation search service.

The service exposes a small read-only surface::

    GET       /               service metadata
    GET|POST  /search         keyword search (Lunr syntax)
    GET       /indexes        index tags
    GET       /list-content   stored routes
    GET       /content        markdown body for one route

Every call opens a short-lived ``httpx.AsyncClient``, sends exactly one
request and surfaces any failure immediately.  There is no retrying,
caching or connection pooling across calls.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

import httpx

from .errors import ApiError, ParseError, UnexpectedResponseError

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float, bool, None]

SEARCH_PATH = "/search"
INDEXES_PATH = "/indexes"
LIST_CONTENT_PATH = "/list-content"
CONTENT_PATH = "/content"
ROOT_PATH = "/"


def _stringify(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(search_params: Optional[Mapping[str, Scalar]]) -> str:
    """Encode ``search_params`` as a query string.

    Keys whose value is ``None`` or ``""`` are left out entirely, so
    optional tool arguments never reach the service as empty parameters.
    """
    if not search_params:
        return ""
    pairs = [
        (key, _stringify(value))
        for key, value in search_params.items()
        if value is not None and value != ""
    ]
    return urlencode(pairs)


class DocsApiClient:
    """Thin async wrapper around the documentation service.

    Parameters
    ----------
    base_url
        Absolute base URL, resolved once at startup.
    transport
        Optional ``httpx`` transport; tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        self._base_url = base_url
        parts = urlsplit(base_url)
        self._origin = (parts.scheme, parts.netloc)
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def resolve_url(
        self,
        path: str,
        search_params: Optional[Mapping[str, Scalar]] = None,
    ) -> str:
        """Join ``path`` onto the base URL and append the sparse query string.

        Paths are always relative to the base (a leading ``/`` does not drop
        a base path prefix).  Raises ``ValueError`` if the result would
        leave the base origin.
        """
        url = urljoin(self._base_url, path.lstrip("/"))
        parts = urlsplit(url)
        if (parts.scheme, parts.netloc) != self._origin:
            raise ValueError(
                f"Path {path!r} resolves outside of {self._base_url}"
            )

        query = build_query(search_params)
        if parts.query and query:
            query = f"{parts.query}&{query}"
        elif parts.query:
            query = parts.query
        return urlunsplit(
            (parts.scheme, parts.netloc, parts.path, query, parts.fragment)
        )

    async def call_api(
        self,
        path: str,
        *,
        method: str = "GET",
        search_params: Optional[Mapping[str, Scalar]] = None,
        body: Any = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        Returns ``None`` when the service answers with an empty body.

        Raises
        ------
        ApiError
            Non-success status, or the request never completed.
        ParseError
            Non-empty body that is not valid JSON.
        """
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = self.resolve_url(path, search_params)
        request_kwargs: Dict[str, Any] = {}
        if method == "POST" and body is not None:
            request_kwargs["content"] = json.dumps(body)
            request_kwargs["headers"] = {"Content-Type": "application/json"}

        logger.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(
                transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.request(method, url, **request_kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(url, None, str(exc) or type(exc).__name__) from exc

        text = response.text
        if not response.is_success:
            logger.warning(
                "%s %s returned HTTP %d", method, url, response.status_code
            )
            raise ApiError(
                url, response.status_code, text or response.reason_phrase
            )

        if not text:
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(url, str(exc)) from exc

    async def _call_for_object(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        payload = await self.call_api(path, **kwargs)
        if not isinstance(payload, dict):
            url = self.resolve_url(path, kwargs.get("search_params"))
            kind = "an empty body" if payload is None else type(payload).__name__
            raise UnexpectedResponseError(
                url, f"expected a JSON object, got {kind}"
            )
        return payload

    # -- endpoint helpers ----------------------------------------------------

    async def service_info(self) -> Any:
        return await self.call_api(ROOT_PATH)

    async def search(
        self,
        query: str,
        *,
        tag: Optional[str] = None,
        max_results: Optional[int] = None,
        method: str = "get",
    ) -> Dict[str, Any]:
        """Run a keyword search over GET (query string) or POST (JSON body)."""
        if method.lower() == "post":
            body = {
                key: value
                for key, value in (
                    ("query", query),
                    ("tag", tag),
                    ("maxResults", max_results),
                )
                if value is not None
            }
            search_params = None
            data = await self._call_for_object(
                SEARCH_PATH, method="POST", body=body
            )
        else:
            search_params = {"q": query, "tag": tag, "maxResults": max_results}
            data = await self._call_for_object(
                SEARCH_PATH, search_params=search_params
            )

        results = data.get("results")
        if results is not None and not (
            isinstance(results, list)
            and all(isinstance(hit, dict) for hit in results)
        ):
            raise UnexpectedResponseError(
                self.resolve_url(SEARCH_PATH, search_params),
                "expected results to be a list of objects",
            )
        return data

    async def list_indexes(self) -> Any:
        return await self.call_api(INDEXES_PATH)

    async def list_content(self) -> Any:
        return await self.call_api(LIST_CONTENT_PATH)

    async def get_content(self, route: str) -> Dict[str, Any]:
        return await self._call_for_object(
            CONTENT_PATH, search_params={"route": route}
        )
