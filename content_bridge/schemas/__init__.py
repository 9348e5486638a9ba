"""
Pydantic schemas for bridge configuration, content documents and paging.
"""

from content_bridge.schemas.content_schema import ContentBody, ContentDocument
from content_bridge.schemas.ingest_schema import (
    IngestReport,
    IngestRequest,
    IngestResponse,
    MappingPreviewRequest,
    MappingPreviewResponse,
    SourceReport,
)
from content_bridge.schemas.paging_schema import (
    PagingConfig,
    PaginationState,
    PreparedRequest,
)
from content_bridge.schemas.source_schema import (
    ContentBridgeConfig,
    FetchConfig,
    MappingConfig,
    MarkdownConfig,
    PaginationConfig,
    SourceConfig,
)

__all__ = [
    "ContentBody",
    "ContentBridgeConfig",
    "ContentDocument",
    "FetchConfig",
    "IngestReport",
    "IngestRequest",
    "IngestResponse",
    "MappingConfig",
    "MappingPreviewRequest",
    "MappingPreviewResponse",
    "MarkdownConfig",
    "PagingConfig",
    "PaginationConfig",
    "PaginationState",
    "PreparedRequest",
    "SourceConfig",
    "SourceReport",
]
