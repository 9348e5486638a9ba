"""
Tests for the /api/v1/ingest and /api/v1/mapping endpoints.
"""

import json
from pathlib import Path
from typing import Any

import pytest
import httpx
from fastapi import FastAPI

from content_bridge.config import Settings, get_settings

SOURCE_BASE_URL = "http://fake-source"


def bridge_config(mapping: dict[str, Any]) -> dict[str, Any]:
    return {
        "sources": [
            {
                "name": "blog",
                "fetch": {
                    "endpointUrl": f"{SOURCE_BASE_URL}/posts",
                    "pagination": {"pageParam": "page", "hasMorePath": "$_more"},
                },
                "mapping": mapping,
            }
        ]
    }


@pytest.mark.asyncio
async def test_health_check(client: httpx.AsyncClient) -> None:
    """Health endpoint should return 200 with app info."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_ingest_inline_config(
    client: httpx.AsyncClient, post_mapping: dict[str, Any]
) -> None:
    """Should page through the source and return every mapped document."""
    response = await client.post(
        "/api/v1/ingest/", json={"config": bridge_config(post_mapping)})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["total_count"] == 3
    assert data["sources"][0]["name"] == "blog"
    assert data["sources"][0]["added_count"] == 3

    first = data["documents"][0]
    assert first["sourcePath"] == "api/posts/1"
    assert first["header"]["slug"] == "hello-world"
    assert first["content"] == "First **post**"
    assert first["isValid"] is True


@pytest.mark.asyncio
async def test_ingest_reads_config_file(
    app: FastAPI, client: httpx.AsyncClient, post_mapping: dict[str, Any], tmp_path: Path
) -> None:
    """Without an inline config the configured site file is used."""
    site = tmp_path / "site.json"
    site.write_text(json.dumps({
        "pluginConfigs": {"content-bridge": {**bridge_config(post_mapping), "maxItems": 1}},
    }), encoding="utf-8")
    app.dependency_overrides[get_settings] = lambda: Settings(bridge_config_path=str(site))

    response = await client.post("/api/v1/ingest/", json={})

    assert response.status_code == 200
    assert response.json()["total_count"] == 1


@pytest.mark.asyncio
async def test_ingest_missing_config_file(
    app: FastAPI, client: httpx.AsyncClient, tmp_path: Path
) -> None:
    app.dependency_overrides[get_settings] = lambda: Settings(
        bridge_config_path=str(tmp_path / "missing.json"))

    response = await client.post("/api/v1/ingest/", json={})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] is True
    assert data["error_code"] == "VALIDATION_ERROR"
    assert "request_id" in data


@pytest.mark.asyncio
async def test_ingest_invalid_body(client: httpx.AsyncClient) -> None:
    """Should return 422 when the inline config has the wrong shape."""
    response = await client.post("/api/v1/ingest/", json={"config": {"sources": "nope"}})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] is True
    assert data["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_ingest_failing_source_fail_fast(
    client: httpx.AsyncClient, post_mapping: dict[str, Any]
) -> None:
    """A record missing required fields fails the request with the field names."""
    mapping = {**post_mapping, "frontMatter": {**post_mapping["frontMatter"], "status": "$_nope"}}
    response = await client.post(
        "/api/v1/ingest/", json={"config": bridge_config(mapping)})

    assert response.status_code == 422
    data = response.json()
    assert data["error_code"] == "MISSING_REQUIRED_FIELDS"
    assert data["details"]["missing"] == ["status"]


@pytest.mark.asyncio
async def test_ingest_failing_source_reported(
    client: httpx.AsyncClient, post_mapping: dict[str, Any]
) -> None:
    config = bridge_config(post_mapping)
    config["sources"].append({
        "name": "gone",
        "fetch": {"endpointUrl": f"{SOURCE_BASE_URL}/gone"},
        "mapping": post_mapping,
    })

    response = await client.post(
        "/api/v1/ingest/", json={"config": config, "failFast": False})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "partial"
    assert data["total_count"] == 3
    assert data["sources"][1]["error_code"] == "SOURCE_API_ERROR"


@pytest.mark.asyncio
async def test_mapping_preview(client: httpx.AsyncClient) -> None:
    """Preview resolves the mapping without enforcing required fields."""
    response = await client.post(
        "/api/v1/mapping/preview",
        json={
            "record": {"id": 9, "title": "Draft Title", "html": "<p>x</p>"},
            "frontMatter": {"title": "$_title", "seo.slug": "$slugify($_title)"},
            "content": "$htmlToMD($_html)",
            "sourcePath": "$concat('drafts/', $_id)",
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "header": {"title": "Draft Title", "seo": {"slug": "draft-title"}},
        "content": "x",
        "sourcePath": "drafts/9",
    }


@pytest.mark.asyncio
async def test_mapping_preview_requires_record(client: httpx.AsyncClient) -> None:
    response = await client.post("/api/v1/mapping/preview", json={"frontMatter": {}})
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
