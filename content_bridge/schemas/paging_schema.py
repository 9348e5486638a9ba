"""
Normalized pagination settings, per-page pagination state and the
prepared HTTP request for one page.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PagingConfig(BaseModel):
    """Pagination settings with defaults filled in; fixed for one traversal."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["page", "offset", "cursor"] | None = None
    page_param: str | None = None
    size_param: str | None = None
    page_size: int | float | None = None
    delay_ms: int | float = 0
    items_path: str = "$_posts"
    total_path: str | None = None
    has_more_path: str | None = None
    next_page_path: str | None = None
    next_cursor_path: str | None = None
    cursor_param: str | None = None
    page_index_start: int | float = 1
    page_index_step: int | float = 1
    cursor_start: str | None = None


class PaginationState(BaseModel):
    """Where the traversal stands after a page; a new instance per page."""

    model_config = ConfigDict(frozen=True)

    has_more: bool = True
    page_index: int | float = 1
    next_cursor: str | None = None


class PreparedRequest(BaseModel):
    """A ready-to-send request for one page."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
