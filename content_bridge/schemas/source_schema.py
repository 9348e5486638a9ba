"""
Pydantic schemas for the user-authored bridge configuration.

Keys are camelCase in the config file (``endpointUrl``, ``pageSize``) and
snake_case in Python; both spellings are accepted. Unknown keys are ignored
so a site config can carry host-specific extras.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Numeric pagination settings may arrive as numbers or numeric strings;
# normalize_pagination coerces them.
NumberLike = int | float | str | None


class BridgeModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PaginationConfig(BridgeModel):
    """Raw pagination settings for one source, before normalization."""

    mode: Literal["page", "offset", "cursor"] | None = Field(
        default=None, description="page | offset | cursor; inferred from pageParam if omitted")
    page_param: str | None = Field(
        default=None, description="Query/body key carrying the page index")
    size_param: str | None = Field(
        default=None, description="Query/body key carrying the page size")
    page_index_start: NumberLike = Field(
        default=None, description="First page index (default 1)")
    page_index_step: NumberLike = Field(
        default=None, description="Page index increment (default 1, or pageSize in offset mode)")
    page_size: NumberLike = Field(default=None, description="Items per page")
    delay_ms: NumberLike = Field(
        default=None, description="Pause between page requests")
    items_path: str | None = Field(
        default=None, description="Expression selecting the item list (default $_posts)")
    total_path: str | None = Field(
        default=None, description="Expression selecting the total item count")
    has_more_path: str | None = Field(
        default=None, description="Expression selecting a has-more flag")
    next_page_path: str | None = Field(
        default=None, description="Expression selecting the next page index")
    next_cursor_path: str | None = Field(
        default=None, description="Expression selecting the next cursor")
    cursor_param: str | None = Field(
        default=None, description="Query/body key carrying the cursor")
    cursor_start: str | None = Field(
        default=None, description="Cursor for the first request")


class FetchConfig(BridgeModel):
    endpoint_url: str | None = Field(default=None, description="API endpoint")
    method: str = Field(default="GET", description="HTTP method")
    headers: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] | list[Any] | str | None = Field(
        default=None, description="Request body for non-GET methods")
    pagination: PaginationConfig | None = None
    timeout_ms: float | None = Field(
        default=None, description="Per-request timeout in milliseconds")


class MappingConfig(BridgeModel):
    front_matter: dict[str, Any] = Field(
        default_factory=dict, description="Mapping tree for the document header")
    content: Any = Field(default=None, description="Expression for the body")
    source_path: Any = Field(
        default=None, description="Expression for the document's source path")


class MarkdownConfig(BridgeModel):
    """Optional per-record markdown file emission."""

    enabled: bool = True
    directory: str | None = Field(
        default=None, description="Output directory; files may not escape it")
    file_name: Any = Field(
        default="{slug}",
        description="Expression or {token} template for the file name")


class SourceConfig(BridgeModel):
    name: str | None = None
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    max_items: int | None = Field(
        default=None, description="Stop after this many documents")
    markdown: MarkdownConfig | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.fetch.endpoint_url or "<unnamed>"


class ContentBridgeConfig(BridgeModel):
    sources: list[SourceConfig] = Field(default_factory=list)
    max_items: int | None = Field(
        default=None, description="Default per-source item cap")
