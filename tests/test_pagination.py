"""
Tests for pagination normalization and the next-page strategy chain.
"""

from typing import Any

from content_bridge.services.pagination import next_pagination_state, normalize_pagination


def next_state(raw: dict[str, Any], data: Any, items_length: int, page_index: int = 1,
               next_cursor: str | None = None):
    return next_pagination_state(
        normalize_pagination(raw),
        data,
        items_length=items_length,
        page_index=page_index,
        next_cursor=next_cursor,
    )


# ─── Normalization ────────────────────────────────────────────────────


def test_normalize_defaults() -> None:
    paging = normalize_pagination(None)
    assert paging.items_path == "$_posts"
    assert paging.page_index_start == 1
    assert paging.page_index_step == 1
    assert paging.delay_ms == 0
    assert paging.mode is None


def test_normalize_infers_offset_mode_and_step() -> None:
    paging = normalize_pagination({"pageParam": "skip", "pageSize": "25"})
    assert paging.mode == "offset"
    assert paging.page_size == 25
    assert paging.page_index_step == 25


def test_normalize_explicit_mode_and_step_win() -> None:
    paging = normalize_pagination(
        {"mode": "page", "pageParam": "offset", "pageSize": 10, "pageIndexStep": 2}
    )
    assert paging.mode == "page"
    assert paging.page_index_step == 2


def test_normalize_offset_without_page_size_steps_by_one() -> None:
    paging = normalize_pagination({"pageParam": "offset", "pageIndexStart": "0"})
    assert paging.page_index_step == 1
    assert paging.page_index_start == 0


# ─── Strategy chain ───────────────────────────────────────────────────


def test_zero_items_stops_even_when_more_is_flagged() -> None:
    state = next_state(
        {"itemsPath": "$_items", "hasMorePath": "$_more"},
        {"items": [], "more": True},
        items_length=0,
        page_index=2,
    )
    assert state.has_more is False
    assert state.page_index == 2


def test_cursor_continues_with_string_cursor() -> None:
    state = next_state({"nextCursorPath": "$_meta.next"}, {"meta": {"next": 42}}, 5, 3)
    assert state.has_more is True
    assert state.next_cursor == "42"
    assert state.page_index == 3


def test_empty_cursor_stops() -> None:
    state = next_state({"nextCursorPath": "$_cursor"}, {"cursor": ""}, 5)
    assert state.has_more is False
    state = next_state({"nextCursorPath": "$_cursor"}, {"cursor": None}, 5)
    assert state.has_more is False


def test_cursor_wins_over_has_more() -> None:
    state = next_state(
        {"nextCursorPath": "$_cursor", "hasMorePath": "$_more"},
        {"cursor": "", "more": True},
        5,
    )
    assert state.has_more is False


def test_has_more_advances_by_step() -> None:
    state = next_state(
        {"hasMorePath": "$_more", "pageIndexStep": 5}, {"more": "yes"}, 5, page_index=10
    )
    assert state.has_more is True
    assert state.page_index == 15

    state = next_state({"hasMorePath": "$_more"}, {"more": "no"}, 5, page_index=10)
    assert state.has_more is False


def test_next_page_is_absolute() -> None:
    state = next_state({"nextPagePath": "$_next"}, {"next": "7"}, 5, page_index=2)
    assert state.has_more is True
    assert state.page_index == 7


def test_non_numeric_next_page_stops() -> None:
    state = next_state({"nextPagePath": "$_next"}, {"next": "last"}, 5)
    assert state.has_more is False
    state = next_state({"nextPagePath": "$_next"}, {}, 5)
    assert state.has_more is False


def test_null_next_page_stops_instead_of_restarting_at_zero() -> None:
    state = next_state({"nextPagePath": "$_next"}, {"next": None}, 5, page_index=3)
    assert state.has_more is False
    assert state.page_index == 3


def test_total_in_page_mode() -> None:
    raw = {"totalPath": "$_total", "pageSize": 10}
    assert next_state(raw, {"total": 25}, 10, page_index=2).has_more is True
    last = next_state(raw, {"total": 25}, 5, page_index=3)
    assert last.has_more is False


def test_total_in_offset_mode() -> None:
    raw = {"totalPath": "$_total", "pageSize": 10, "pageParam": "offset"}
    state = next_state(raw, {"total": 25}, 10, page_index=10)
    assert state.has_more is True
    assert state.page_index == 20
    assert next_state(raw, {"total": 25}, 5, page_index=20).has_more is False


def test_non_numeric_total_stops() -> None:
    raw = {"totalPath": "$_total", "pageSize": 10}
    assert next_state(raw, {"total": "many"}, 10).has_more is False


def test_total_requires_page_size() -> None:
    """Without a page size the total is ignored and the fallback applies."""
    state = next_state({"totalPath": "$_total"}, {"total": 1}, 10, page_index=1)
    assert state.has_more is True
    assert state.page_index == 2


def test_short_page_stops() -> None:
    assert next_state({"pageSize": 10}, {}, 9).has_more is False


def test_full_page_falls_through_to_default() -> None:
    state = next_state({"pageSize": 10, "pageIndexStep": 3}, {}, 10, page_index=4)
    assert state.has_more is True
    assert state.page_index == 5


def test_default_fallback_ignores_step() -> None:
    state = next_state({"pageIndexStep": 5}, {}, 3, page_index=1)
    assert state.has_more is True
    assert state.page_index == 2
