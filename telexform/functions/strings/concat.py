"""Delimiter-joined concatenation of getter values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
import logging

from telexform.functions.api import ExprFunc, FunctionSpec, ParamSpec
from telexform.value_model import adapt_runtime_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConcatExpr:
    """Built ``Concat`` expression.

    Holds only the delimiter and the getter tuple, so one instance can be
    evaluated concurrently against different contexts.
    """

    delimiter: str
    getters: tuple[ExprFunc, ...]

    def __call__(self, ctx: Any) -> str:
        fragments: list[str] = []
        for position, getter in enumerate(self.getters):
            value = adapt_runtime_value(getter(ctx))
            if not value.renderable:
                logger.debug(
                    "Concat: value at position %d of type %s renders as an empty fragment",
                    position,
                    type(value.raw).__name__,
                )
            fragments.append(value.to_fragment())
        return self.delimiter.join(fragments)


def build(delimiter: str, getters: Sequence[ExprFunc]) -> ConcatExpr:
    """Build a ``Concat`` expression.

    Any callable taking the context works as a getter.

    Example:
    - ``build("-", [LiteralGetter("a"), LiteralGetter(1)])(ctx)`` -> ``"a-1"``
    """
    return ConcatExpr(delimiter=delimiter, getters=tuple(getters))


FUNCTION_SPEC = FunctionSpec(
    name="Concat",
    namespace="strings",
    params=(
        ParamSpec("delimiter", "string"),
        ParamSpec("vals", "getter_list"),
    ),
    factory=build,
    description="Join getter values as text with a delimiter",
)
