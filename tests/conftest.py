"""
Pytest configuration & shared fixtures.
"""

from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from content_bridge.main import create_app

SOURCE_BASE_URL = "http://fake-source"

# Two pages served by the fake source API at /posts?page=N
SOURCE_PAGES: dict[int, dict[str, Any]] = {
    1: {
        "posts": [
            {"id": 1, "title": "Hello World", "body": "<p>First <b>post</b></p>"},
            {"id": 2, "title": "Second Post", "body": "<p>Second</p>"},
        ],
        "more": True,
    },
    2: {
        "posts": [
            {"id": 3, "title": "Third Post", "body": "<p>Third</p>"},
        ],
        "more": False,
    },
}

POST_MAPPING: dict[str, Any] = {
    "frontMatter": {
        "id": "$_id",
        "lang": "en",
        "title": "$_title",
        "slug": "$slugify($_title)",
        "canonical": "$concat('/posts/', $slugify($_title))",
        "template": "post",
        "layout": "default",
        "status": "published",
    },
    "content": "$htmlToMD($_body)",
    "sourcePath": "$concat('api/posts/', $_id)",
}


def source_api_handler(request: httpx.Request) -> httpx.Response:
    """Serve SOURCE_PAGES; anything else is a 404."""
    if request.url.path != "/posts":
        return httpx.Response(404, text="Not Found")
    page = int(request.url.params.get("page", "1"))
    payload = SOURCE_PAGES.get(page, {"posts": [], "more": False})
    return httpx.Response(200, json=payload)


@pytest.fixture
def post_mapping() -> dict[str, Any]:
    return POST_MAPPING


@pytest_asyncio.fixture
async def app() -> AsyncIterator[FastAPI]:
    """Provide a fresh FastAPI app whose shared http client hits the fake source."""
    application = create_app()

    # ASGITransport does not run the lifespan, so wire the client by hand
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(source_api_handler),
        base_url=SOURCE_BASE_URL,
        timeout=httpx.Timeout(5),
    ) as mock_http:
        application.state.http_client = mock_http
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Provide an async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
