"""
telexform - value-concatenation operator of a telemetry transformation language
"""

from telexform.context import TransformContext
from telexform.functions.registry import FunctionRegistry
from telexform.functions.strings.concat import build as concat
from telexform.getters import ExprGetter, Getter, LiteralGetter, PathGetter, StandardGetter
from telexform.version import __version__

__all__ = [
    "ExprGetter",
    "FunctionRegistry",
    "Getter",
    "LiteralGetter",
    "PathGetter",
    "StandardGetter",
    "TransformContext",
    "__version__",
    "concat",
]
