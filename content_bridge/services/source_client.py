"""
HTTP transport for remote content APIs.

One call, one page: send the prepared request through the shared
``httpx.AsyncClient`` and return the decoded JSON body. The request is
cancelled once its timeout elapses. Timeouts, connection failures,
non-2xx statuses and undecodable bodies all raise; there are no retries.
"""

import asyncio
import json
from typing import Any

import httpx

from content_bridge.core.exceptions import (
    SourceAPIConnectionException,
    SourceAPIException,
    SourceAPITimeoutException,
)
from content_bridge.core.logging import get_logger
from content_bridge.schemas.paging_schema import PreparedRequest

logger = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 30_000


class SourceClient:
    """httpx-backed JSON fetcher shared by every source traversal."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def fetch_json(
        self,
        request: PreparedRequest,
        timeout_ms: float | None = DEFAULT_TIMEOUT_MS,
    ) -> Any:
        """
        Perform one request and return its JSON body.

        Raises:
            SourceAPITimeoutException:    The request outlived ``timeout_ms``.
            SourceAPIConnectionException: The endpoint could not be reached.
            SourceAPIException:           Non-2xx status or invalid JSON.
        """
        logger.debug(
            "Fetching %s %s", request.method, request.url,
            extra={"method": request.method, "url": request.url},
        )

        timeout = timeout_ms / 1000 if timeout_ms and timeout_ms > 0 else None
        try:
            response = await asyncio.wait_for(self._send(request), timeout=timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise SourceAPITimeoutException(
                message=f"Request to {request.url} timed out after {timeout_ms} ms.",
                details={"endpoint": request.url, "timeout_ms": timeout_ms},
            ) from exc
        except httpx.ConnectError as exc:
            raise SourceAPIConnectionException(
                details={"endpoint": request.url, "error": str(exc)},
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceAPIException(
                message=f"Request to {request.url} failed.",
                details={"endpoint": request.url, "error": str(exc)},
            ) from exc

        if not response.is_success:
            raise SourceAPIException(
                message=f"API request failed ({response.status_code}).",
                details={
                    "endpoint": request.url,
                    "status_code": response.status_code,
                    "body": response.text[:500],
                },
            )

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SourceAPIException(
                message="Failed to parse source API response as JSON.",
                details={
                    "endpoint": request.url,
                    "error": str(exc),
                    "raw_body": response.text[:500],
                },
            ) from exc

    async def _send(self, request: PreparedRequest) -> httpx.Response:
        return await self._http.request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )
