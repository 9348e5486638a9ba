"""
Tests for the shared value coercions.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from content_bridge.utils.helpers import (
    MISSING,
    is_falsy,
    is_numeric_like,
    stringify,
    to_boolean,
    to_iso,
    to_number,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", 0), (None, 0), ("  12 ", 12), ("1e3", 1000),
        ("0x1f", 31), (True, 1), ([], 0), (["7"], 7),
    ],
)
def test_to_number(value: object, expected: float) -> None:
    assert to_number(value) == expected


@pytest.mark.parametrize("value", [MISSING, "abc", {"a": 1}, [1, 2]])
def test_to_number_nan(value: object) -> None:
    assert math.isnan(to_number(value))


def test_stringify() -> None:
    assert stringify(True) == "true"
    assert stringify(None) == "null"
    assert stringify(3.0) == "3"
    assert stringify(0.5) == "0.5"
    assert stringify([1, None, "a"]) == "1,,a"
    assert stringify({"a": [1]}) == '{"a":[1]}'


def test_to_boolean_and_is_falsy() -> None:
    assert to_boolean("TRUE") and to_boolean(" y ") and to_boolean(2)
    assert not to_boolean("false") and not to_boolean("") and not to_boolean(None)
    assert is_falsy(0) and is_falsy("") and is_falsy(MISSING) and is_falsy(math.nan)
    assert not is_falsy("0") and not is_falsy([]) and not is_falsy({})


def test_is_numeric_like() -> None:
    assert is_numeric_like("42") and is_numeric_like(1.5)
    assert not is_numeric_like("") and not is_numeric_like(True) and not is_numeric_like("x")


def test_to_iso_normalizes_to_utc() -> None:
    moment = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert to_iso(moment) == "2024-05-01T10:00:00.123Z"
    assert to_iso(datetime(2024, 5, 1)) == "2024-05-01T00:00:00.000Z"
