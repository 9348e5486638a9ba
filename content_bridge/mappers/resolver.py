"""
Mapping resolver: walk a mapping tree and evaluate every leaf.

    {"title": "$_name",
     "seo.description": "$truncate($_summary, 160)",
     "tags": ["$_category", "news"],
     "authors": {"$each": "$_authors", "$map": {"name": "$_fullName"}}}

- Nested objects and arrays produce the same structure in the output.
- A dotted key (``seo.description``) describes *output* nesting: the value
  is written at ``output["seo"]["description"]``.
- Keys whose expression resolves to MISSING are left out entirely.
- ``{"$each": list_expr, "$map": tree}`` maps every item of a list through
  ``tree`` against the item's iteration scope.
"""

from typing import Any

from content_bridge.mappers.evaluator import ExpressionEvaluator, get_evaluator
from content_bridge.mappers.functions import iteration_scope
from content_bridge.utils.helpers import MISSING, is_nullish, stringify

EACH_KEY = "$each"
MAP_KEY = "$map"


def resolve_mapping(
    mapping: Any,
    source: Any,
    evaluator: ExpressionEvaluator | None = None,
) -> Any:
    """Resolve a mapping tree (object or array) against one source record."""
    evaluator = evaluator or get_evaluator()
    if isinstance(mapping, dict):
        return _resolve_object(mapping, source, evaluator)
    if isinstance(mapping, list):
        return _resolve_list(mapping, source, evaluator)
    return {}


def build_front_matter(
    mapping: dict[str, Any] | None,
    source: Any,
    evaluator: ExpressionEvaluator | None = None,
) -> dict[str, Any]:
    header = resolve_mapping(mapping or {}, source, evaluator)
    return header if isinstance(header, dict) else {}


def resolve_content(
    mapping: Any,
    source: Any,
    evaluator: ExpressionEvaluator | None = None,
) -> str:
    """Resolve the body expression; anything but a string mapping yields ``""``."""
    if not isinstance(mapping, str):
        return ""
    value = (evaluator or get_evaluator()).evaluate(source, mapping)
    if is_nullish(value):
        return ""
    return stringify(value)


def set_path(target: dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dotted path, creating intermediate objects."""
    if "." not in path:
        target[path] = value
        return

    parts = [part for part in path.split(".") if part]
    if not parts:
        target[path] = value
        return

    current = target
    for key in parts[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[parts[-1]] = value


# ─── Internal ─────────────────────────────────────────────────────────


def _resolve_node(node: Any, source: Any, evaluator: ExpressionEvaluator) -> Any:
    if isinstance(node, dict):
        if EACH_KEY in node:
            return _resolve_each(node, source, evaluator)
        return _resolve_object(node, source, evaluator)
    if isinstance(node, list):
        return _resolve_list(node, source, evaluator)
    return evaluator.evaluate(source, node)


def _resolve_object(
    mapping: dict[str, Any], source: Any, evaluator: ExpressionEvaluator
) -> dict[str, Any]:
    output: dict[str, Any] = {}
    for key, raw_value in mapping.items():
        # Nested objects keep their key literally, dots included.
        if isinstance(raw_value, dict) and EACH_KEY not in raw_value:
            output[key] = _resolve_object(raw_value, source, evaluator)
            continue
        value = _resolve_node(raw_value, source, evaluator)
        if value is MISSING:
            continue
        set_path(output, key, value)
    return output


def _resolve_list(
    mapping: list[Any], source: Any, evaluator: ExpressionEvaluator
) -> list[Any]:
    values = (_resolve_node(entry, source, evaluator) for entry in mapping)
    return [value for value in values if value is not MISSING]


def _resolve_each(
    node: dict[str, Any], source: Any, evaluator: ExpressionEvaluator
) -> list[Any]:
    items = evaluator.evaluate(source, node[EACH_KEY])
    if not isinstance(items, list):
        return []
    template = node.get(MAP_KEY)
    if template is None:
        return list(items)

    results = []
    for item in items:
        value = _resolve_node(template, iteration_scope(source, item), evaluator)
        if value is not MISSING:
            results.append(value)
    return results
