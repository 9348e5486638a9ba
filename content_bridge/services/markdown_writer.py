"""
Markdown artifact emission.

Each accepted record can also be written to
``{directory}/{rendered file name}`` as a markdown file with YAML front
matter. The file name template is either one full mapping expression
(``$concat($_slug, ".md")``) or text with ``{token}`` placeholders
(``{lang}/{slug}``); both resolve against the raw record merged with its
resolved front matter. A rendered path that leaves the directory is
rejected before anything is written.
"""

import asyncio
import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

from content_bridge.core.exceptions import MarkdownWriteException, OutputPathException
from content_bridge.core.logging import get_logger
from content_bridge.mappers.evaluator import ExpressionEvaluator, get_evaluator
from content_bridge.mappers.expression import get_path
from content_bridge.schemas.content_schema import ContentDocument
from content_bridge.schemas.source_schema import MarkdownConfig
from content_bridge.utils.helpers import is_nullish, stringify

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"\{\s*([^{}]+?)\s*\}")
_INDENT = "  "

DEFAULT_EXTENSION = ".md"


def render_markdown(header: dict[str, Any], content: str) -> str:
    """Front matter between ``---`` lines, a blank line, then the body."""
    lines = ["---", *_yaml_lines(header, 0), "---"]
    document = "\n".join(lines) + "\n"
    if content:
        document += "\n" + content.rstrip("\n") + "\n"
    return document


def render_file_name(
    template: str,
    scope: Any,
    evaluator: ExpressionEvaluator | None = None,
) -> str:
    """Render the file name template against the merged record scope."""
    text = template.strip()
    if text.startswith("$"):
        value = (evaluator or get_evaluator()).evaluate(scope, text)
        return "" if is_nullish(value) else stringify(value)

    def _substitute(match: re.Match[str]) -> str:
        value = get_path(scope, match.group(1))
        return "" if is_nullish(value) else stringify(value)

    return _TOKEN_RE.sub(_substitute, text)


class MarkdownWriter:
    """Writes one markdown file per document for a single source."""

    def __init__(
        self,
        directory: str | Path,
        file_name: str = "{slug}",
        evaluator: ExpressionEvaluator | None = None,
    ) -> None:
        self._directory = Path(directory).resolve()
        self._file_name = file_name
        self._evaluator = evaluator or get_evaluator()

    @classmethod
    def from_config(
        cls,
        config: MarkdownConfig | None,
        evaluator: ExpressionEvaluator | None = None,
        log: Any = None,
    ) -> "MarkdownWriter | None":
        """Build a writer, or return None when export is off or misconfigured."""
        if config is None or not config.enabled:
            return None

        log = log or logger
        if not isinstance(config.directory, str) or not config.directory.strip():
            log.warning("Markdown export disabled: missing output directory.")
            return None
        if not isinstance(config.file_name, str) or not config.file_name.strip():
            log.warning(
                "Markdown export disabled: fileName must be a non-empty string.",
                extra={"directory": config.directory},
            )
            return None
        return cls(config.directory, config.file_name, evaluator)

    @property
    def directory(self) -> Path:
        return self._directory

    def resolve_path(self, record: Any, header: dict[str, Any]) -> Path:
        """
        Target path for one record.

        Raises:
            OutputPathException: Empty file name, or a path outside the directory.
        """
        scope = {**record, **header} if isinstance(record, dict) else dict(header)
        name = render_file_name(self._file_name, scope, self._evaluator).strip()
        if not name:
            raise OutputPathException(
                message="Markdown fileName template resolved to an empty value.",
                details={"template": self._file_name},
            )
        if not Path(name).suffix:
            name += DEFAULT_EXTENSION

        target = (self._directory / name).resolve()
        if target == self._directory or not target.is_relative_to(self._directory):
            raise OutputPathException(
                message="Markdown output path escapes the output directory.",
                details={"path": name, "directory": str(self._directory)},
            )
        return target

    async def write(self, path: Path, document: ContentDocument) -> Path:
        """
        Render ``document`` and write it to ``path``.

        Raises:
            MarkdownWriteException: The file or its directories could not be created.
        """
        text = render_markdown(document.header, document.content)
        try:
            await asyncio.to_thread(_write_text, path, text)
        except OSError as exc:
            raise MarkdownWriteException(
                message=f"Failed to write markdown file {path}: {exc.strerror or exc}",
                details={"path": str(path), "source_path": document.source_path},
            ) from exc
        logger.debug("Markdown written", extra={"path": str(path)})
        return path


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _yaml_lines(mapping: dict[str, Any], depth: int) -> list[str]:
    indent = _INDENT * depth
    lines: list[str] = []
    for key, value in mapping.items():
        if isinstance(value, dict) and value:
            lines.append(f"{indent}{key}:")
            lines.extend(_yaml_lines(value, depth + 1))
        elif isinstance(value, list) and value:
            lines.append(f"{indent}{key}:")
            lines.extend(f"{indent}{_INDENT}- {_yaml_scalar(item)}" for item in value)
        else:
            lines.append(f"{indent}{key}: {_yaml_scalar(value)}")
    return lines


def _yaml_scalar(value: Any) -> str:
    """JSON text for strings and dates; numbers, booleans and null verbatim."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return stringify(value)
    if isinstance(value, (datetime, date)):
        return json.dumps(stringify(value))
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, dict) and not value:
        return "{}"
    if isinstance(value, list) and not value:
        return "[]"
    return json.dumps(value, ensure_ascii=False, default=str)
