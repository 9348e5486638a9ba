"""
Pagination engine.

``normalize_pagination`` turns the user's pagination block into a
``PagingConfig`` with defaults filled in. ``next_pagination_state`` decides,
after each page, whether to fetch another one and with which index/cursor.

The decision is an ordered chain; the first strategy that returns a state
wins:

    0. zero items           → stop (checked before the chain)
    1. nextCursorPath       → continue with the returned cursor
    2. hasMorePath          → follow the flag, advance by pageIndexStep
    3. nextPagePath         → jump to the returned page index
    4. totalPath + pageSize → compare position against the total
    5. pageSize             → stop on a short page
    6. fallback             → continue, advance by exactly 1

All functions here are pure: they read the config, the response body and
the current state and return a new ``PaginationState``.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from content_bridge.mappers.evaluator import evaluate
from content_bridge.schemas.paging_schema import PagingConfig, PaginationState
from content_bridge.schemas.source_schema import PaginationConfig
from content_bridge.utils.helpers import (
    is_finite_number,
    is_nullish,
    normalize_number,
    stringify,
    to_boolean,
    to_number_or_none,
)

Resolver = Callable[[Any, str], Any]

_OFFSET_PARAMS = ("skip", "offset")


def normalize_pagination(raw: PaginationConfig | dict[str, Any] | None) -> PagingConfig:
    """Fill defaults into a raw pagination block."""
    if raw is None:
        paging = PaginationConfig()
    elif isinstance(raw, PaginationConfig):
        paging = raw
    else:
        paging = PaginationConfig.model_validate(raw)

    mode = paging.mode
    if mode is None and paging.page_param in _OFFSET_PARAMS:
        mode = "offset"

    page_size = to_number_or_none(paging.page_size)
    page_index_step = to_number_or_none(paging.page_index_step)
    if page_index_step is None:
        page_index_step = (
            page_size if mode == "offset" and is_finite_number(page_size) else 1
        )

    delay_ms = to_number_or_none(paging.delay_ms)
    page_index_start = to_number_or_none(paging.page_index_start)

    return PagingConfig(
        mode=mode,
        page_param=paging.page_param,
        size_param=paging.size_param,
        page_size=page_size,
        delay_ms=delay_ms if delay_ms is not None else 0,
        items_path=paging.items_path or "$_posts",
        total_path=paging.total_path,
        has_more_path=paging.has_more_path,
        next_page_path=paging.next_page_path,
        next_cursor_path=paging.next_cursor_path,
        cursor_param=paging.cursor_param,
        page_index_start=page_index_start if page_index_start is not None else 1,
        page_index_step=page_index_step,
        cursor_start=paging.cursor_start,
    )


@dataclass(frozen=True, slots=True)
class PageContext:
    paging: PagingConfig
    data: Any
    items_length: int
    page_index: int | float
    next_cursor: str | None
    resolve: Resolver

    def stop(self) -> PaginationState:
        return PaginationState(
            has_more=False, page_index=self.page_index, next_cursor=self.next_cursor)

    def advance(self, step: int | float, has_more: bool = True) -> PaginationState:
        return PaginationState(
            has_more=has_more,
            page_index=normalize_number(self.page_index + step) if has_more else self.page_index,
            next_cursor=self.next_cursor,
        )


Strategy = Callable[[PageContext], PaginationState | None]


def next_cursor_strategy(ctx: PageContext) -> PaginationState | None:
    if not isinstance(ctx.paging.next_cursor_path, str):
        return None
    value = ctx.resolve(ctx.data, ctx.paging.next_cursor_path)
    if is_nullish(value) or value == "":
        return ctx.stop()
    return PaginationState(
        has_more=True, page_index=ctx.page_index, next_cursor=stringify(value))


def has_more_strategy(ctx: PageContext) -> PaginationState | None:
    if not isinstance(ctx.paging.has_more_path, str):
        return None
    has_more = to_boolean(ctx.resolve(ctx.data, ctx.paging.has_more_path))
    return ctx.advance(ctx.paging.page_index_step, has_more=has_more)


def next_page_strategy(ctx: PageContext) -> PaginationState | None:
    if not isinstance(ctx.paging.next_page_path, str):
        return None
    # null means no next page; it never restarts the traversal at index 0.
    next_page = to_number_or_none(ctx.resolve(ctx.data, ctx.paging.next_page_path))
    if next_page is None or not math.isfinite(next_page):
        return ctx.stop()
    return PaginationState(
        has_more=True, page_index=next_page, next_cursor=ctx.next_cursor)


def total_strategy(ctx: PageContext) -> PaginationState | None:
    paging = ctx.paging
    if not isinstance(paging.total_path, str) or not is_finite_number(paging.page_size):
        return None
    total = to_number_or_none(ctx.resolve(ctx.data, paging.total_path))
    if total is None or not math.isfinite(total):
        return ctx.stop()

    if paging.mode == "offset":
        has_more = ctx.page_index + paging.page_size < total
    else:
        has_more = ctx.page_index * paging.page_size < total
    return PaginationState(
        has_more=has_more,
        page_index=normalize_number(ctx.page_index + paging.page_index_step),
        next_cursor=ctx.next_cursor,
    )


def short_page_strategy(ctx: PageContext) -> PaginationState | None:
    if not is_finite_number(ctx.paging.page_size):
        return None
    if ctx.items_length < ctx.paging.page_size:
        return ctx.stop()
    return None


STRATEGIES: tuple[Strategy, ...] = (
    next_cursor_strategy,
    has_more_strategy,
    next_page_strategy,
    total_strategy,
    short_page_strategy,
)


def next_pagination_state(
    paging: PagingConfig,
    data: Any,
    items_length: int,
    page_index: int | float,
    next_cursor: str | None = None,
    resolve: Resolver | None = None,
) -> PaginationState:
    """Decide whether another page follows and compute its index/cursor."""
    ctx = PageContext(
        paging=paging,
        data=data,
        items_length=items_length,
        page_index=page_index,
        next_cursor=next_cursor,
        resolve=resolve or evaluate,
    )
    if items_length == 0:
        return ctx.stop()

    for strategy in STRATEGIES:
        state = strategy(ctx)
        if state is not None:
            return state

    return ctx.advance(1)
