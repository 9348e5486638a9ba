"""
Shared value helpers.

API payloads and mapping expressions follow JSON/JavaScript value rules
(``"" -> 0``, ``"yes" -> true``, ``[1, 2] -> "1,2"``), so every coercion the
evaluator and the pagination engine need lives here in one place.
"""

import json
import math
import re
from datetime import date, datetime, timezone
from typing import Any


class _Missing:
    """Marker for an absent value, distinct from JSON ``null`` (``None``)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_TRUTHY_TOKENS = frozenset({"true", "1", "yes", "y", "on"})

_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_RADIX_RE = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def utc_now() -> datetime:
    """Return the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def is_nullish(value: Any) -> bool:
    return value is None or value is MISSING


def to_boolean(value: Any) -> bool:
    """
    Coerce a value to bool using explicit truthy tokens for strings.

    ``"yes"``, ``"on"``, ``"1"`` are true; any other string is false,
    including non-empty ones such as ``"no"`` or ``"abc"``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_TOKENS
    if is_nullish(value):
        return False
    return True


def is_falsy(value: Any) -> bool:
    """JSON-style falsiness: missing, null, false, 0, NaN and ``""``."""
    if is_nullish(value) or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or math.isnan(value)
    if isinstance(value, str):
        return value == ""
    return False


def to_number(value: Any) -> float:
    """
    Convert ``value`` to a float the way a JSON API client would.

    Returns NaN for anything that is not a number: ``"abc"``, objects,
    missing values. ``null``, ``""`` and ``[]`` convert to 0.
    """
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return _parse_number_text(value)
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1 and not isinstance(value[0], (list, dict)):
            return to_number(stringify(value[0]) if value[0] is not None else "")
    return math.nan


def to_number_or_none(value: Any) -> int | float | None:
    """Like ``to_number`` but absent or non-numeric input yields None."""
    if is_nullish(value):
        return None
    number = to_number(value)
    if math.isnan(number):
        return None
    return normalize_number(number)


def normalize_number(number: float) -> int | float:
    """Return integral finite floats as ``int`` so they render without ``.0``."""
    if isinstance(number, int):
        return number
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return number


def is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def is_numeric_like(value: Any) -> bool:
    """True for finite numbers and non-blank strings that parse as one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if not isinstance(value, str) or not value.strip():
        return False
    return math.isfinite(_parse_number_text(value))


def stringify(value: Any) -> str:
    """Render ``value`` as text (``true``, ``null``, ``1`` instead of ``1.0``)."""
    if isinstance(value, str):
        return value
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return str(normalize_number(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list):
        return ",".join("" if is_nullish(item) else stringify(item) for item in value)
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def to_iso(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-01-02T03:04:05.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ─── Internal ─────────────────────────────────────────────────────────


def _parse_number_text(text: str) -> float:
    stripped = text.strip()
    if not stripped:
        return 0.0
    if _DECIMAL_RE.fullmatch(stripped):
        return float(stripped)
    radix = _RADIX_RE.fullmatch(stripped)
    if radix:
        try:
            return float(int(radix.group(2), _RADIX_BASES[radix.group(1).lower()]))
        except ValueError:
            return math.nan
    if stripped in ("Infinity", "+Infinity"):
        return math.inf
    if stripped == "-Infinity":
        return -math.inf
    return math.nan
