"""
Request / response schemas for the HTTP surface, plus the ingest report
returned by ``IngestService.ingest_all``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from content_bridge.schemas.content_schema import ContentDocument
from content_bridge.schemas.source_schema import BridgeModel, ContentBridgeConfig


class SourceReport(BaseModel):
    """Outcome of one source's traversal."""

    name: str
    added_count: int = 0
    skipped: bool = False
    error: str | None = None
    error_code: str | None = None


class IngestReport(BaseModel):
    sources: list[SourceReport] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return sum(source.added_count for source in self.sources)

    @property
    def failed(self) -> list[SourceReport]:
        return [source for source in self.sources if source.error]


class IngestRequest(BridgeModel):
    """Body of ``POST /ingest/``; without ``config`` the configured file is used."""

    config: ContentBridgeConfig | None = Field(
        default=None, description="Inline bridge config")
    fail_fast: bool = Field(
        default=True, description="Abort on the first failing source")


class IngestResponse(BaseModel):
    status: str = "ok"
    total_count: int = 0
    sources: list[SourceReport] = Field(default_factory=list)
    documents: list[ContentDocument] = Field(default_factory=list)


class MappingPreviewRequest(BridgeModel):
    """Resolve a mapping against a sample record without validation."""

    record: Any = Field(..., description="Sample API record")
    front_matter: dict[str, Any] = Field(default_factory=dict)
    content: Any = None
    source_path: Any = None


class MappingPreviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    header: dict[str, Any]
    content: str
    source_path: Any = Field(default=None, alias="sourcePath")
