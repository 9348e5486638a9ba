"""
The content document handed to the host's content sink.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContentBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = ""


class ContentDocument(BaseModel):
    """One accepted record: resolved front matter plus body text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    header: dict[str, Any] = Field(..., description="Resolved front matter")
    body: ContentBody = Field(default_factory=ContentBody)
    content: str = Field(default="", description="Body text (same as body.content)")
    source_path: str = Field(
        ..., min_length=1, alias="sourcePath",
        description="Non-empty path identifying the document")
    is_valid: bool = Field(default=True, alias="isValid")
