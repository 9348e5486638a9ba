"""
Per-page request construction.

GET requests carry the page index, page size and cursor as query
parameters. Other methods carry them as keys of a JSON object body. A
string or array body cannot be patched safely, so pagination values are not
injected into it; that is reported once, as a warning, when the builder
is created.
"""

import json
from typing import Any

import httpx

from content_bridge.core.logging import get_logger
from content_bridge.schemas.paging_schema import PreparedRequest
from content_bridge.utils.helpers import is_finite_number, stringify

logger = get_logger(__name__)


class RequestBuilder:
    """Build the request for each page of one source."""

    def __init__(
        self,
        url: str,
        method: str | None = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        page_param: str | None = None,
        size_param: str | None = None,
        cursor_param: str | None = None,
        log: Any = None,
    ) -> None:
        self._url = url
        self._method = (method or "GET").upper()
        self._headers = dict(headers or {})
        self._body = body
        self._page_param = page_param
        self._size_param = size_param
        self._cursor_param = cursor_param

        has_params = bool(page_param or size_param or cursor_param)
        if self._method != "GET" and not isinstance(body, dict) and has_params:
            (log or logger).warning(
                "Pagination params could not be added to a non-object (string or array) body.",
                extra={"url": url, "method": self._method},
            )

    @property
    def method(self) -> str:
        return self._method

    def build(
        self,
        page_index: Any = None,
        page_size: Any = None,
        next_cursor: Any = None,
    ) -> PreparedRequest:
        values = self._paging_values(page_index, page_size, next_cursor)

        if self._method == "GET":
            url = httpx.URL(self._url)
            for name, value in values.items():
                url = url.copy_set_param(name, stringify(value))
            return PreparedRequest(
                url=str(url), method=self._method, headers=dict(self._headers))

        headers = dict(self._headers)
        payload = self._body
        if isinstance(payload, dict):
            payload = {**payload, **values}

        if isinstance(payload, (dict, list)):
            body: str | None = json.dumps(payload, separators=(",", ":"), default=str)
            if "content-type" not in headers and "Content-Type" not in headers:
                headers["Content-Type"] = "application/json"
        elif payload is None:
            body = None
        else:
            body = stringify(payload)

        return PreparedRequest(
            url=self._url, method=self._method, headers=headers, body=body)

    def _paging_values(
        self, page_index: Any, page_size: Any, next_cursor: Any
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        if self._page_param and is_finite_number(page_index):
            values[self._page_param] = page_index
        if self._size_param and is_finite_number(page_size):
            values[self._size_param] = page_size
        if self._cursor_param and next_cursor is not None:
            values[self._cursor_param] = next_cursor
        return values


def build_request(
    url: str,
    method: str | None = "GET",
    headers: dict[str, str] | None = None,
    body: Any = None,
    page_param: str | None = None,
    size_param: str | None = None,
    page_index: Any = None,
    page_size: Any = None,
    cursor_param: str | None = None,
    next_cursor: Any = None,
    log: Any = None,
) -> PreparedRequest:
    """One-shot form of :class:`RequestBuilder` for a single page."""
    builder = RequestBuilder(
        url,
        method=method,
        headers=headers,
        body=body,
        page_param=page_param,
        size_param=size_param,
        cursor_param=cursor_param,
        log=log,
    )
    return builder.build(page_index, page_size, next_cursor)
