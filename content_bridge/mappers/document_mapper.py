"""
Concrete mapper: one API record → ContentDocument.

Resolves the front matter and body through the mapping resolver, then
enforces the document contract: every required header key present and
truthy, and a non-empty ``sourcePath``. Any violation is fatal for the
record's source.
"""

from typing import Any

from content_bridge.core.exceptions import (
    MissingRequiredFieldsException,
    SourcePathException,
)
from content_bridge.core.logging import get_logger
from content_bridge.mappers.base_mapper import RecordMapper
from content_bridge.mappers.evaluator import ExpressionEvaluator, get_evaluator
from content_bridge.mappers.resolver import build_front_matter, resolve_content
from content_bridge.schemas.content_schema import ContentBody, ContentDocument
from content_bridge.schemas.source_schema import MappingConfig
from content_bridge.utils.helpers import is_falsy, stringify

logger = get_logger(__name__)

REQUIRED_KEYS = (
    "id",
    "lang",
    "title",
    "slug",
    "canonical",
    "template",
    "layout",
    "status",
)


def get_missing_required(header: dict[str, Any]) -> list[str]:
    """Required keys that are absent or falsy in ``header``, in declaration order."""
    return [key for key in REQUIRED_KEYS if is_falsy(header.get(key))]


class DocumentMapper(RecordMapper[ContentDocument]):
    """Map raw API records into content documents."""

    def __init__(
        self,
        mapping: MappingConfig,
        evaluator: ExpressionEvaluator | None = None,
        source_name: str = "",
    ) -> None:
        self._mapping = mapping
        self._evaluator = evaluator or get_evaluator()
        self._source_name = source_name

    def build_header(self, record: Any) -> dict[str, Any]:
        header = build_front_matter(self._mapping.front_matter, record, self._evaluator)
        if not is_falsy(header.get("lang")):
            header["lang"] = stringify(header["lang"])
        return header

    def map_record(self, record: Any) -> ContentDocument:
        """
        Transform one record.

        Raises:
            MissingRequiredFieldsException: A required header key is missing.
            SourcePathException:            sourcePath is unmapped or empty.
        """
        header = self.build_header(record)
        content = resolve_content(self._mapping.content, record, self._evaluator)

        missing = get_missing_required(header)
        if missing:
            logger.warning(
                "Missing required frontMatter fields: %s",
                ", ".join(missing),
                extra={"source": self._source_name, "missing": missing},
            )
            raise MissingRequiredFieldsException(
                missing, details={"source": self._source_name})

        return ContentDocument(
            header=header,
            body=ContentBody(content=content),
            content=content,
            source_path=self.resolve_source_path(record),
        )

    def resolve_source_path(self, record: Any) -> str:
        expr = self._mapping.source_path
        if not isinstance(expr, str):
            raise SourcePathException(
                message="Missing mapping.sourcePath.",
                details={"source": self._source_name},
            )

        mapped = self._evaluator.evaluate(record, expr)
        if not isinstance(mapped, str) or not mapped.strip():
            raise SourcePathException(
                details={"source": self._source_name, "expression": expr},
            )
        return mapped.strip()
