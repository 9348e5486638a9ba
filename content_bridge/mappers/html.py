"""
Best-effort HTML → Markdown conversion for the ``htmlToMD`` function.

Regex based: API bodies are usually simple CMS output, and the
conversion must never fail on malformed markup.
"""

import re
from typing import Any

from content_bridge.utils.helpers import is_nullish, stringify

_FLAGS = re.IGNORECASE

_PRE_CODE_RE = re.compile(
    r"<\s*pre\b[^>]*>\s*<\s*code\b[^>]*>([\s\S]*?)<\s*/\s*code>\s*<\s*/\s*pre>", _FLAGS
)
_HEADING_RE = re.compile(r"<\s*h([1-6])\b[^>]*>([\s\S]*?)<\s*/\s*h\1>", _FLAGS)
_BR_RE = re.compile(r"<\s*br\s*/?>", _FLAGS)
_BOLD_RE = re.compile(r"<\s*(strong|b)\b[^>]*>([\s\S]*?)<\s*/\s*(strong|b)>", _FLAGS)
_ITALIC_RE = re.compile(r"<\s*(em|i)\b[^>]*>([\s\S]*?)<\s*/\s*(em|i)>", _FLAGS)
_CODE_RE = re.compile(r"<\s*code\b[^>]*>([\s\S]*?)<\s*/\s*code>", _FLAGS)
_LINK_RE = re.compile(
    r"<\s*a\b[^>]*href=[\"']([^\"']+)[\"'][^>]*>([\s\S]*?)<\s*/\s*a>", _FLAGS
)
_IMG_ALT_FIRST_RE = re.compile(
    r"<\s*img\b[^>]*alt=[\"']([^\"']*)[\"'][^>]*src=[\"']([^\"']+)[\"'][^>]*/?>", _FLAGS
)
_IMG_SRC_FIRST_RE = re.compile(
    r"<\s*img\b[^>]*src=[\"']([^\"']+)[\"'][^>]*alt=[\"']([^\"']*)[\"'][^>]*/?>", _FLAGS
)
_LIST_ITEM_RE = re.compile(r"<\s*li\b[^>]*>([\s\S]*?)<\s*/\s*li>", _FLAGS)
_LIST_RE = re.compile(r"<\s*/?\s*(ul|ol)\b[^>]*>", _FLAGS)
_BLOCK_RE = re.compile(r"<\s*(?:p|div)\b[^>]*>([\s\S]*?)<\s*/\s*(?:p|div)>", _FLAGS)
_TAG_RE = re.compile(r"<[^>]+>")

_DECIMAL_ENTITY_RE = re.compile(r"&#(\d+);")
_HEX_ENTITY_RE = re.compile(r"&#x([0-9a-f]+);", _FLAGS)
_NAMED_ENTITY_RE = re.compile(r"&([a-z]+);", _FLAGS)

_NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
}


def strip_tags(value: Any) -> str:
    return _TAG_RE.sub("", "" if is_nullish(value) else stringify(value))


def decode_entities(value: Any) -> str:
    """Decode ``&#NN;``, ``&#xHH;`` and the common named entities."""
    text = "" if is_nullish(value) else stringify(value)
    text = _DECIMAL_ENTITY_RE.sub(lambda m: _code_point(m.group(1), 10, m.group(0)), text)
    text = _HEX_ENTITY_RE.sub(lambda m: _code_point(m.group(1), 16, m.group(0)), text)
    return _NAMED_ENTITY_RE.sub(
        lambda m: _NAMED_ENTITIES.get(m.group(1), m.group(0)), text
    )


def html_to_markdown(value: Any) -> str:
    if is_nullish(value):
        return ""

    markdown = stringify(value).replace("\r\n", "\n")
    if not markdown.strip():
        return ""

    markdown = _PRE_CODE_RE.sub(
        lambda m: f"\n```\n{decode_entities(m.group(1)).strip()}\n```\n", markdown
    )
    markdown = _HEADING_RE.sub(
        lambda m: f"{'#' * int(m.group(1))} {strip_tags(m.group(2)).strip()}\n\n",
        markdown,
    )

    markdown = _BR_RE.sub("\n", markdown)
    markdown = _BOLD_RE.sub(lambda m: f"**{m.group(2)}**", markdown)
    markdown = _ITALIC_RE.sub(lambda m: f"*{m.group(2)}*", markdown)
    markdown = _CODE_RE.sub(
        lambda m: f"`{decode_entities(strip_tags(m.group(1)).strip())}`", markdown
    )
    markdown = _LINK_RE.sub(
        lambda m: f"[{strip_tags(m.group(2)).strip()}]({m.group(1)})", markdown
    )
    markdown = _IMG_ALT_FIRST_RE.sub(lambda m: f"![{m.group(1)}]({m.group(2)})", markdown)
    markdown = _IMG_SRC_FIRST_RE.sub(lambda m: f"![{m.group(2)}]({m.group(1)})", markdown)
    markdown = _LIST_ITEM_RE.sub(lambda m: f"- {strip_tags(m.group(1)).strip()}\n", markdown)
    markdown = _LIST_RE.sub("\n", markdown)
    markdown = _BLOCK_RE.sub(lambda m: f"{strip_tags(m.group(1)).strip()}\n\n", markdown)
    markdown = _TAG_RE.sub("", markdown)

    markdown = decode_entities(markdown)
    markdown = re.sub(r"[ \t]+\n", "\n", markdown)
    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    return markdown.strip()


def _code_point(digits: str, base: int, fallback: str) -> str:
    try:
        code = int(digits, base)
    except ValueError:
        return fallback
    if code < 0 or code > 0x10FFFF:
        return fallback
    return chr(code)
