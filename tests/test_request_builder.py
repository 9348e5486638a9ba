"""
Tests for per-page request construction.
"""

import json
import logging
import math

import pytest

from content_bridge.services.request_builder import RequestBuilder, build_request


def test_get_sets_configured_query_params() -> None:
    request = build_request(
        "https://api.test/posts?lang=en",
        page_param="page",
        size_param="limit",
        page_index=2,
        page_size=10,
    )
    assert request.method == "GET"
    assert request.url == "https://api.test/posts?lang=en&page=2&limit=10"
    assert request.body is None


def test_get_overrides_existing_param_and_skips_unset_values() -> None:
    request = build_request(
        "https://api.test/posts?page=9",
        method="get",
        page_param="page",
        size_param="limit",
        cursor_param="cursor",
        page_index=1,
        page_size=math.nan,
        next_cursor=None,
    )
    assert request.method == "GET"
    assert request.url == "https://api.test/posts?page=1"


def test_get_without_param_names_leaves_url_untouched() -> None:
    request = build_request("https://api.test/posts", page_index=3, page_size=5)
    assert request.url == "https://api.test/posts"


def test_get_cursor_param() -> None:
    request = build_request(
        "https://api.test/posts", cursor_param="after", next_cursor="c-123"
    )
    assert request.url == "https://api.test/posts?after=c-123"


def test_post_object_body_receives_paging_values() -> None:
    body = {"query": "x", "page": 99}
    request = build_request(
        "https://api.test/search",
        method="post",
        body=body,
        page_param="page",
        size_param="size",
        page_index=2,
        page_size=20,
    )
    assert request.method == "POST"
    assert request.url == "https://api.test/search"
    assert json.loads(request.body) == {"query": "x", "page": 2, "size": 20}
    assert request.headers["Content-Type"] == "application/json"
    assert body == {"query": "x", "page": 99}


def test_post_keeps_caller_content_type() -> None:
    request = build_request(
        "https://api.test/search",
        method="POST",
        headers={"content-type": "application/vnd.api+json"},
        body={"q": 1},
    )
    assert request.headers == {"content-type": "application/vnd.api+json"}


def test_post_list_body_is_serialized_without_injection(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING):
        request = build_request(
            "https://api.test/batch", method="POST", body=[1, 2], page_param="page", page_index=1
        )
    assert json.loads(request.body) == [1, 2]
    assert "(string or array) body" in caplog.records[0].getMessage()


def test_string_body_is_sent_verbatim_and_warns_once(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        builder = RequestBuilder(
            "https://api.test/graphql",
            method="POST",
            body="query { posts }",
            page_param="page",
        )
        first = builder.build(page_index=1)
        second = builder.build(page_index=2)

    assert first.body == "query { posts }"
    assert second.body == "query { posts }"
    assert "Content-Type" not in first.headers
    warnings = [r for r in caplog.records if "non-object body" in r.getMessage()]
    assert len(warnings) == 1


def test_string_body_without_paging_params_does_not_warn(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING):
        RequestBuilder("https://api.test/graphql", method="POST", body="q")
    assert not caplog.records
