"""Deferred, context-bound value producers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, TYPE_CHECKING

from telexform.context import CONTEXT_ROOTS
from telexform.value_model import TxValue, adapt_runtime_value, normalize_path

if TYPE_CHECKING:
    from telexform.context import TransformContext


class Getter(ABC):
    """Produces exactly one value per call for a given context."""

    @abstractmethod
    def get(self, ctx: "TransformContext") -> Any:
        """Evaluate against ``ctx``."""

    def __call__(self, ctx: "TransformContext") -> Any:
        return self.get(ctx)


class StandardGetter(Getter):
    """Adapter for a plain ``fn(ctx) -> value`` callable."""

    def __init__(self, fn: Callable[[Any], Any]):
        self._fn = fn

    def get(self, ctx: "TransformContext") -> Any:
        return self._fn(ctx)


class LiteralGetter(Getter):
    def __init__(self, value: Any):
        self.value = value

    def get(self, ctx: "TransformContext") -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"LiteralGetter({self.value!r})"


class PathGetter(Getter):
    """Reads a value out of one of the context roots.

    Paths use JSON pointer tokens (``/attributes/http.method``); a step that
    does not exist resolves to ``None``.
    """

    def __init__(self, path: str, root: str = "item"):
        if root not in CONTEXT_ROOTS:
            raise ValueError(f"Unknown context root: {root}")
        self.path = normalize_path(path)
        self.root = root

    def get(self, ctx: "TransformContext") -> Any:
        resolved = adapt_runtime_value(ctx.root(self.root)).resolve(path=self.path)
        return resolved.raw

    def __repr__(self) -> str:
        return f"PathGetter({self.path!r}, root={self.root!r})"


class ExprGetter(Getter):
    """Feeds the result of a built expression into another function."""

    def __init__(self, expr: Callable[[Any], Any]):
        self.expr = expr

    def get(self, ctx: "TransformContext") -> Any:
        value = self.expr(ctx)
        if isinstance(value, TxValue):
            return value.raw
        return value
