"""
Tests for settings and bridge config loading.
"""

import json
from pathlib import Path

import pytest

from content_bridge.config import Settings, load_bridge_config
from content_bridge.core.exceptions import ValidationException


def write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_settings_cors_origins() -> None:
    settings = Settings(allowed_origins="http://a.test, ,http://b.test")
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.default_timeout_ms == 30_000


def test_load_whole_file_as_config(tmp_path: Path) -> None:
    path = write_json(tmp_path / "bridge.json", {
        "maxItems": 10,
        "sources": [{"fetch": {"endpointUrl": "https://api.test", "timeoutMs": 500}}],
    })
    config = load_bridge_config(path)

    assert config.max_items == 10
    assert config.sources[0].fetch.endpoint_url == "https://api.test"
    assert config.sources[0].fetch.timeout_ms == 500
    assert config.sources[0].fetch.method == "GET"


def test_load_plugin_entry_from_site_file(tmp_path: Path) -> None:
    path = write_json(tmp_path / "site.json", {
        "title": "My site",
        "pluginConfigs": {
            "other-plugin": {"enabled": True},
            "bridge": {"sources": [{"name": "blog"}]},
        },
    })
    config = load_bridge_config(path, key="bridge")
    assert [s.display_name for s in config.sources] == ["blog"]


def test_missing_plugin_entry_yields_empty_config(tmp_path: Path) -> None:
    path = write_json(tmp_path / "site.json", {"pluginConfigs": {}})
    assert load_bridge_config(path).sources == []


def test_pagination_accepts_numeric_strings(tmp_path: Path) -> None:
    path = write_json(tmp_path / "bridge.json", {
        "sources": [{"fetch": {"pagination": {"pageSize": "20", "mode": "offset"}}}],
    })
    pagination = load_bridge_config(path).sources[0].fetch.pagination
    assert pagination is not None
    assert pagination.page_size == "20"
    assert pagination.mode == "offset"


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps({"sources": "nope"}), json.dumps({"sources": [{"maxItems": "x"}]})],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bridge.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValidationException) as exc_info:
        load_bridge_config(path)
    assert exc_info.value.status_code == 422


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ValidationException) as exc_info:
        load_bridge_config(tmp_path / "absent.json")
    assert "absent.json" in exc_info.value.message
