"""
Expression evaluator.

``evaluate(source, expr)`` is a pure function of the record and the
expression (apart from ``now``/``nanoid``/``uuid``, whose clock and id
source are injectable). It never raises for missing fields, unknown
functions or bad input: those resolve to MISSING and the mapping layer
drops the key.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from content_bridge.core.logging import get_logger
from content_bridge.mappers.expression import (
    Call,
    Literal,
    Node,
    PathRef,
    RawLiteral,
    get_path,
    parse_expression,
)
from content_bridge.mappers.functions import BUILTINS, CallContext, FunctionTable
from content_bridge.utils.helpers import MISSING, utc_now
from content_bridge.utils.ids import IdGenerator, RandomIdGenerator

logger = get_logger(__name__)

_NODE_TYPES = (PathRef, Call, Literal, RawLiteral)


class ExpressionEvaluator:
    """Evaluate mapping expressions against a source record."""

    def __init__(
        self,
        functions: FunctionTable | None = None,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.functions = functions or BUILTINS
        self.id_generator: IdGenerator = id_generator or RandomIdGenerator()
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def evaluate(self, source: Any, expr: Any) -> Any:
        """
        Resolve ``expr`` against ``source``.

        Non-string values (numbers, booleans, pre-resolved objects) pass
        through unchanged; ``None`` resolves to MISSING.
        """
        if expr is None or expr is MISSING:
            return MISSING
        if isinstance(expr, str):
            node = parse_expression(expr)
        elif isinstance(expr, _NODE_TYPES):
            node = expr
        else:
            return expr

        if isinstance(node, PathRef):
            return get_path(source, node.segments)
        if isinstance(node, Call):
            return self._call(node, source)
        return node.value

    def _call(self, node: Call, source: Any) -> Any:
        entry = self.functions.get(node.name)
        if entry is None:
            logger.debug("Unknown expression function", extra={"function": node.name})
            return MISSING

        fn, special = entry
        ctx = CallContext(evaluator=self, source=source)
        try:
            if special:
                return fn(ctx, node.args)
            return fn(ctx, [self.evaluate(source, arg) for arg in node.args])
        except (TypeError, ValueError, OverflowError, RecursionError) as exc:
            logger.debug(
                "Expression function failed",
                extra={"function": node.name, "error": str(exc)},
            )
            return MISSING


_default_evaluator = ExpressionEvaluator()


def get_evaluator() -> ExpressionEvaluator:
    """Shared evaluator with the built-in table and random ids."""
    return _default_evaluator


def evaluate(source: Any, expr: Any) -> Any:
    """Evaluate ``expr`` against ``source`` with the shared evaluator."""
    return _default_evaluator.evaluate(source, expr)


__all__ = ["ExpressionEvaluator", "Node", "evaluate", "get_evaluator", "MISSING"]
