"""
Tests for expression parsing, path lookup and the evaluator contract.
"""

from content_bridge.mappers.evaluator import ExpressionEvaluator, evaluate
from content_bridge.mappers.expression import (
    Call,
    Literal,
    PathRef,
    RawLiteral,
    get_path,
    parse_expression,
    path_segments,
    split_args,
)
from content_bridge.mappers.functions import BUILTINS, CallContext
from content_bridge.utils.helpers import MISSING


# ─── Parsing ──────────────────────────────────────────────────────────


def test_parse_path_reference() -> None:
    node = parse_expression("  $_a.b[2].c ")
    assert node == PathRef("a.b[2].c")
    assert node.segments == ("a", "b", "2", "c")


def test_parse_function_call_with_nested_args() -> None:
    node = parse_expression("$concat($_a, $upper($_b), 'x, y')")
    assert isinstance(node, Call)
    assert node.name == "concat"
    assert node.args == (
        PathRef("a"),
        Call("upper", (PathRef("b"),)),
        Literal("x, y"),
    )


def test_parse_quoted_and_bare_literals() -> None:
    assert parse_expression('"hello"') == Literal("hello")
    assert parse_expression("'hello'") == Literal("hello")
    assert parse_expression(" post ") == RawLiteral("post")


def test_mistyped_prefix_is_a_bare_literal() -> None:
    """A misspelt path prefix silently yields the literal text."""
    assert evaluate({"name": "x"}, "$name.title") == "$name.title"


def test_split_args_respects_parentheses_and_quotes() -> None:
    assert split_args("$_a, $f($_b, $_c), \"d, e\", 'f(g'") == [
        "$_a",
        "$f($_b, $_c)",
        '"d, e"',
        "'f(g'",
    ]
    assert split_args("") == []


def test_path_segments_rewrites_bracket_indices() -> None:
    assert path_segments("items[0].tags[12]") == ("items", "0", "tags", "12")


# ─── Path lookup ──────────────────────────────────────────────────────


def test_get_path_missing_intermediate_returns_missing() -> None:
    record = {"a": {"b": None}, "list": [{"c": 1}]}
    assert get_path(record, "a.b.c") is MISSING
    assert get_path(record, "x.y.z") is MISSING
    assert get_path(record, "list.5.c") is MISSING
    assert get_path(None, "a") is MISSING


def test_get_path_indices_and_length() -> None:
    record = {"tags": ["a", "b", "c"], "title": "abc"}
    assert get_path(record, "tags[1]") == "b"
    assert get_path(record, "tags.length") == 3
    assert get_path(record, "title.length") == 3
    assert get_path(record, "title.0") == "a"


def test_get_path_keeps_null_leaf() -> None:
    """A present null is a value, not an absent field."""
    assert get_path({"a": None}, "a") is None


# ─── Evaluator ────────────────────────────────────────────────────────


def test_evaluate_passes_non_strings_through() -> None:
    assert evaluate({}, 5) == 5
    assert evaluate({}, True) is True
    assert evaluate({}, {"k": "v"}) == {"k": "v"}
    assert evaluate({}, None) is MISSING


def test_unknown_function_is_missing() -> None:
    assert evaluate({"a": 1}, "$doesNotExist($_a)") is MISSING


def test_function_failure_degrades_to_missing() -> None:
    table = BUILTINS.copy()

    @table.register("boom")
    def _boom(ctx: CallContext, args: list) -> None:
        raise ValueError("bad input")

    evaluator = ExpressionEvaluator(functions=table)
    assert evaluator.evaluate({}, "$boom()") is MISSING
    assert "boom" not in BUILTINS


def test_evaluate_does_not_mutate_record() -> None:
    record = {"tags": [{"name": "a"}], "title": "T"}
    snapshot = {"tags": [{"name": "a"}], "title": "T"}
    evaluate(record, "$iter($_tags, $obj($_name, $_title))")
    evaluate(record, "$merge($_tags, $arr(1))")
    assert record == snapshot
