"""
Built-in functions for ``$name(...)`` expressions.

Ordinary functions receive their arguments already evaluated. Special forms
(``obj``, ``iter``) receive the unevaluated argument nodes because they need
the argument syntax (key inference) or a different evaluation scope.

Every function degrades to MISSING or a neutral value on bad input; none of
them raise for data problems.
"""

import calendar
import math
import re
import unicodedata
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from content_bridge.mappers.expression import (
    Literal,
    Node,
    PathRef,
    RawLiteral,
    get_path,
    path_segments,
)
from content_bridge.mappers.html import html_to_markdown
from content_bridge.utils.helpers import (
    MISSING,
    is_falsy,
    is_nullish,
    is_numeric_like,
    normalize_number,
    stringify,
    to_boolean,
    to_iso,
    to_number,
)
from content_bridge.utils.ids import NANOID_DEFAULT_SIZE

if TYPE_CHECKING:
    from content_bridge.mappers.evaluator import ExpressionEvaluator


@dataclass(frozen=True, slots=True)
class CallContext:
    """What a built-in can see besides its arguments."""

    evaluator: "ExpressionEvaluator"
    source: Any

    def evaluate(self, node: Node, scope: Any = MISSING) -> Any:
        return self.evaluator.evaluate(self.source if scope is MISSING else scope, node)


Function = Callable[[CallContext, list[Any]], Any]
SpecialForm = Callable[[CallContext, tuple[Node, ...]], Any]


class FunctionTable:
    """Name → implementation registry used by the evaluator."""

    def __init__(self) -> None:
        self._functions: dict[str, Callable[..., Any]] = {}
        self._special: set[str] = set()

    def register(self, *names: str, special: bool = False) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            for name in names:
                self._functions[name] = fn
                if special:
                    self._special.add(name)
                else:
                    self._special.discard(name)
            return fn

        return decorator

    def get(self, name: str) -> tuple[Callable[..., Any], bool] | None:
        fn = self._functions.get(name)
        if fn is None:
            return None
        return fn, name in self._special

    def copy(self) -> "FunctionTable":
        table = FunctionTable()
        table._functions = dict(self._functions)
        table._special = set(self._special)
        return table

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._functions))


BUILTINS = FunctionTable()
register = BUILTINS.register


def iteration_scope(parent: Any, item: Any) -> dict[str, Any]:
    """Scope for one item of ``iter``/``$each``: parent fields, item fields, then item/parent."""
    base = dict(parent) if isinstance(parent, dict) else {}
    if isinstance(item, dict):
        return {**base, **item, "item": item, "parent": parent}
    return {**base, "value": item, "item": item, "parent": parent}


# ─── String ──────────────────────────────────────────────────────────


@register("slugify")
def _slugify(ctx: CallContext, args: list[Any]) -> str:
    return slugify(_text(_at(args, 0)))


@register("concat")
def _concat(ctx: CallContext, args: list[Any]) -> str:
    return "".join(_text(value) for value in args)


@register("lower")
def _lower(ctx: CallContext, args: list[Any]) -> str:
    return _text(_at(args, 0)).lower()


@register("upper")
def _upper(ctx: CallContext, args: list[Any]) -> str:
    return _text(_at(args, 0)).upper()


@register("trim")
def _trim(ctx: CallContext, args: list[Any]) -> str:
    return _text(_at(args, 0)).strip()


@register("replace")
def _replace(ctx: CallContext, args: list[Any]) -> str:
    value, old, new = (_text(_at(args, i)) for i in range(3))
    if not old:
        return value
    return value.replace(old, new)


@register("truncate")
def _truncate(ctx: CallContext, args: list[Any]) -> str:
    text = _text(_at(args, 0))
    limit = to_number(_at(args, 1))
    if not math.isfinite(limit):
        return text
    size = math.floor(limit)
    if size <= 0:
        return ""
    return text[:size]


@register("split")
def _split(ctx: CallContext, args: list[Any]) -> list[str]:
    value = _at(args, 0)
    separator = _at(args, 1)
    separator = "," if is_nullish(separator) else stringify(separator)
    values = value if isinstance(value, list) else [value]

    parts: list[str] = []
    for entry in values:
        if is_nullish(entry):
            continue
        text = stringify(entry)
        pieces = text.split(separator) if separator else [text]
        parts.extend(piece.strip() for piece in pieces if piece.strip())
    return parts


# ─── Array ───────────────────────────────────────────────────────────


@register("join")
def _join(ctx: CallContext, args: list[Any]) -> str:
    items = _list(_at(args, 0))
    separator = _at(args, 1)
    separator = "," if is_nullish(separator) else stringify(separator)
    return separator.join(_text(item) for item in items)


@register("merge")
def _merge(ctx: CallContext, args: list[Any]) -> list[Any]:
    return [item for value in args if isinstance(value, list) for item in value]


@register("unique")
def _unique(ctx: CallContext, args: list[Any]) -> list[Any]:
    seen: set[str] = set()
    result = []
    for item in _list(_at(args, 0)):
        key = _text(item)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


@register("compact")
def _compact(ctx: CallContext, args: list[Any]) -> list[Any]:
    return [item for item in _list(_at(args, 0)) if not _is_empty_value(item)]


@register("extract")
def _extract(ctx: CallContext, args: list[Any]) -> list[Any]:
    items = _list(_at(args, 0))
    specs = [_parse_extract_spec(spec) for spec in args[1:] if not is_nullish(spec)]
    specs = [spec for spec in specs if spec[1]]
    if not specs:
        return list(items)

    if len(specs) == 1:
        _, segments = specs[0]
        values = (get_path(item, segments) for item in items)
        return [value for value in values if not _is_empty_value(value)]

    rows = []
    for item in items:
        row = {}
        for alias, segments in specs:
            value = get_path(item, segments)
            if value is not MISSING:
                row[alias] = value
        if row:
            rows.append(row)
    return rows


# ─── Object / array construction ─────────────────────────────────────

_BARE_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.-]*")


@register("obj", special=True)
def _obj(ctx: CallContext, nodes: tuple[Node, ...]) -> dict[str, Any]:
    output: dict[str, Any] = {}

    if len(nodes) >= 2 and len(nodes) % 2 == 0 and all(
        _is_key_node(node) for node in nodes[::2]
    ):
        for key_node, value_node in zip(nodes[::2], nodes[1::2]):
            value = ctx.evaluate(value_node)
            if value is not MISSING:
                output[key_node.value] = value
        return output

    for position, node in enumerate(nodes, start=1):
        value = ctx.evaluate(node)
        if value is not MISSING:
            output[_infer_key(node, position)] = value
    return output


@register("arr")
def _arr(ctx: CallContext, args: list[Any]) -> list[Any]:
    return [value for value in args if value is not MISSING]


@register("iter", special=True)
def _iter(ctx: CallContext, nodes: tuple[Node, ...]) -> list[Any]:
    if not nodes:
        return []
    items = ctx.evaluate(nodes[0])
    if not isinstance(items, list) or not items:
        return []
    if len(nodes) < 2:
        return list(items)

    template = nodes[1]
    results = []
    for item in items:
        value = ctx.evaluate(template, scope=iteration_scope(ctx.source, item))
        if value is not MISSING:
            results.append(value)
    return results


# ─── Date / number ───────────────────────────────────────────────────

_DATETIME = TypeAdapter(datetime)

_UNIT_ALIASES = {
    **dict.fromkeys(("y", "yr", "yrs", "year", "years"), "year"),
    **dict.fromkeys(("mo", "mon", "month", "months"), "month"),
    **dict.fromkeys(("w", "wk", "week", "weeks"), "week"),
    **dict.fromkeys(("d", "day", "days"), "day"),
    **dict.fromkeys(("h", "hr", "hrs", "hour", "hours"), "hour"),
    **dict.fromkeys(("m", "min", "mins", "minute", "minutes"), "minute"),
    **dict.fromkeys(("s", "sec", "secs", "second", "seconds"), "second"),
}

_TIMEDELTA_UNITS = {
    "week": "weeks",
    "day": "days",
    "hour": "hours",
    "minute": "minutes",
    "second": "seconds",
}


@register("today", "now")
def _now(ctx: CallContext, args: list[Any]) -> str:
    return to_iso(ctx.evaluator.now())


@register("date")
def _date(ctx: CallContext, args: list[Any]) -> Any:
    value, pattern = _at(args, 0), _at(args, 1)
    moment = ctx.evaluator.now() if is_falsy(value) else parse_date(value)
    if moment is None:
        return MISSING
    if is_falsy(pattern):
        return to_iso(moment)
    return format_date(moment, stringify(pattern))


@register("add")
def _add(ctx: CallContext, args: list[Any]) -> Any:
    return _shift(args, 1)


@register("sub")
def _sub(ctx: CallContext, args: list[Any]) -> Any:
    return _shift(args, -1)


@register("number")
def _number(ctx: CallContext, args: list[Any]) -> Any:
    number = to_number(_at(args, 0))
    if math.isnan(number):
        return MISSING
    return normalize_number(number)


# ─── Logic ───────────────────────────────────────────────────────────


@register("boolean")
def _boolean(ctx: CallContext, args: list[Any]) -> bool:
    return to_boolean(_at(args, 0))


@register("default")
def _default(ctx: CallContext, args: list[Any]) -> Any:
    value = _at(args, 0)
    if is_nullish(value) or value == "":
        return _at(args, 1)
    return value


@register("if")
def _if(ctx: CallContext, args: list[Any]) -> Any:
    return _at(args, 1) if to_boolean(_at(args, 0)) else _at(args, 2)


@register("eq")
def _eq(ctx: CallContext, args: list[Any]) -> bool:
    return values_equal(_at(args, 0), _at(args, 1))


@register("neq")
def _neq(ctx: CallContext, args: list[Any]) -> bool:
    return not values_equal(_at(args, 0), _at(args, 1))


@register("gt")
def _gt(ctx: CallContext, args: list[Any]) -> bool:
    return compare_values(_at(args, 0), _at(args, 1)) > 0


@register("gte")
def _gte(ctx: CallContext, args: list[Any]) -> bool:
    return compare_values(_at(args, 0), _at(args, 1)) >= 0


@register("lt")
def _lt(ctx: CallContext, args: list[Any]) -> bool:
    return compare_values(_at(args, 0), _at(args, 1)) < 0


@register("lte")
def _lte(ctx: CallContext, args: list[Any]) -> bool:
    return compare_values(_at(args, 0), _at(args, 1)) <= 0


@register("and")
def _and(ctx: CallContext, args: list[Any]) -> bool:
    return all(to_boolean(value) for value in args)


@register("or")
def _or(ctx: CallContext, args: list[Any]) -> bool:
    return any(to_boolean(value) for value in args)


@register("not")
def _not(ctx: CallContext, args: list[Any]) -> bool:
    return not to_boolean(_at(args, 0))


@register("coalesce")
def _coalesce(ctx: CallContext, args: list[Any]) -> Any:
    for value in args:
        if not is_nullish(value) and value != "":
            return value
    return MISSING


@register("contains")
def _contains(ctx: CallContext, args: list[Any]) -> bool:
    haystack, needle = _at(args, 0), _at(args, 1)
    if isinstance(haystack, list):
        return any(values_equal(item, needle) for item in haystack)
    if isinstance(haystack, str):
        return _text(needle) in haystack
    return False


# ─── Content / identity ──────────────────────────────────────────────


@register("htmlToMD")
def _html_to_md(ctx: CallContext, args: list[Any]) -> str:
    return html_to_markdown(_at(args, 0))


@register("nanoid")
def _nanoid(ctx: CallContext, args: list[Any]) -> str:
    requested = _at(args, 0)
    length = to_number(NANOID_DEFAULT_SIZE if is_nullish(requested) else requested)
    size = math.floor(length) if math.isfinite(length) and length > 0 else NANOID_DEFAULT_SIZE
    return ctx.evaluator.id_generator.nanoid(size)


@register("uuid")
def _uuid(ctx: CallContext, args: list[Any]) -> str:
    return ctx.evaluator.id_generator.uuid()


# ─── Shared helpers ──────────────────────────────────────────────────

_TRANSLITERATE = str.maketrans({
    "ı": "i",
    "ß": "ss",
    "æ": "ae",
    "Æ": "AE",
    "ø": "o",
    "Ø": "O",
    "đ": "d",
    "Đ": "D",
    "ł": "l",
    "Ł": "L",
})


def slugify(text: str) -> str:
    """``"Çok Güzel Başlık!"`` → ``"cok-guzel-baslik"``."""
    normalized = unicodedata.normalize("NFKD", text.translate(_TRANSLITERATE))
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")


def values_equal(left: Any, right: Any) -> bool:
    """Numeric comparison when both sides look numeric, strict equality otherwise."""
    if is_numeric_like(left) and is_numeric_like(right):
        return to_number(left) == to_number(right)
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def compare_values(left: Any, right: Any) -> float:
    """Ordering difference; NaN when either side is null/missing."""
    if is_nullish(left) or is_nullish(right):
        return math.nan
    if is_numeric_like(left) and is_numeric_like(right):
        return to_number(left) - to_number(right)

    left_text, right_text = stringify(left), stringify(right)
    if left_text == right_text:
        return 0
    return 1 if left_text > right_text else -1


def parse_date(value: Any) -> datetime | None:
    """Parse ISO-8601 text, unix timestamps or RFC 2822 text; naive results are UTC."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time())
    elif isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    else:
        try:
            moment = _DATETIME.validate_python(value.strip() if isinstance(value, str) else value)
        except ValidationError:
            if not isinstance(value, str):
                return None
            try:
                moment = parsedate_to_datetime(value)
            except (TypeError, ValueError, IndexError):
                return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_date(moment: datetime, pattern: str) -> str:
    """Substitute ``YYYY MM DD HH mm ss`` with local-time components."""
    local = moment.astimezone()
    return (
        pattern.replace("YYYY", str(local.year))
        .replace("MM", f"{local.month:02d}")
        .replace("DD", f"{local.day:02d}")
        .replace("HH", f"{local.hour:02d}")
        .replace("mm", f"{local.minute:02d}")
        .replace("ss", f"{local.second:02d}")
    )


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month shift, clamping the day to the target month's length."""
    total = moment.month - 1 + months
    year = moment.year + total // 12
    month = total % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _shift(args: list[Any], sign: int) -> Any:
    base, amount, unit = _at(args, 0), _at(args, 1), _at(args, 2)
    delta = to_number(amount)
    if not math.isfinite(delta):
        return MISSING
    delta *= sign

    if is_numeric_like(base):
        return normalize_number(to_number(base) + delta)

    moment = parse_date(base)
    if moment is None:
        return MISSING

    unit_name = _UNIT_ALIASES.get(
        "day" if is_nullish(unit) else stringify(unit).strip().lower()
    )
    if unit_name is None:
        return MISSING
    if unit_name == "year":
        return to_iso(add_months(moment, int(delta) * 12))
    if unit_name == "month":
        return to_iso(add_months(moment, int(delta)))
    return to_iso(moment + timedelta(**{_TIMEDELTA_UNITS[unit_name]: delta}))


def _parse_extract_spec(spec: Any) -> tuple[str, tuple[str, ...]]:
    text = stringify(spec).strip()
    if ":" in text:
        alias, _, path = text.partition(":")
        alias, path = alias.strip(), path.strip()
    else:
        alias, path = "", text
    if path.startswith("$_"):
        path = path[2:]
    segments = path_segments(path)
    if not alias:
        alias = segments[-1] if segments else path
    return alias, segments


def _is_key_node(node: Node) -> bool:
    if isinstance(node, Literal):
        return True
    return isinstance(node, RawLiteral) and _BARE_KEY_RE.fullmatch(node.value) is not None


def _infer_key(node: Node, position: int) -> str:
    if isinstance(node, PathRef) and node.segments:
        return node.segments[-1]
    if isinstance(node, Literal) and node.value:
        return node.value
    return f"field{position}"


def _is_empty_value(value: Any) -> bool:
    if is_nullish(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _at(args: list[Any], index: int) -> Any:
    return args[index] if index < len(args) else MISSING


def _text(value: Any) -> str:
    return "" if is_nullish(value) else stringify(value)


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
