"""
This module defines all telexform features using a unified registry system.
The CLI and the HTTP API both dispatch through it.
"""

from typing import (
    Dict,
    Any,
    Callable,
    List,
    Optional,
    TypeVar,
    Generic,
)
from dataclasses import dataclass
import logging

from telexform.context import TransformContext
from telexform.error_msg import TXException
from telexform.functions.registry import FunctionRegistry
from telexform.getters import Getter, LiteralGetter, PathGetter

logger = logging.getLogger("telexform.features")

T = TypeVar("T")


class OperationResult(Generic[T]):
    """Wrapper for operation results with success/error handling"""

    def __init__(
        self, success: bool, data: Optional[T] = None, error: Optional[str] = None
    ):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "OperationResult[T]":
        return cls(success=False, error=error)


@dataclass
class Feature:
    """A named operation exposed on the CLI and the HTTP API"""

    name: str
    description: str
    handler: Callable
    api_endpoint: Optional[Dict[str, Any]] = None


class FeatureRegistry:
    """Registry for all telexform features"""

    _features: Dict[str, Feature] = {}

    @classmethod
    def register(cls, feature: Feature) -> Feature:
        """Register a new feature"""
        cls._features[feature.name] = feature
        return feature

    @classmethod
    def get_feature(cls, name: str) -> Optional[Feature]:
        """Get a feature by name"""
        return cls._features.get(name)

    @classmethod
    def get_all_features(cls) -> Dict[str, Feature]:
        """Get all registered features"""
        return cls._features.copy()


# ----------------- Feature Handlers -----------------


def handle_version(**kwargs) -> OperationResult[Dict[str, str]]:
    """Handle version request"""
    from telexform.version import get_version

    return OperationResult[Dict[str, str]](
        success=True, data={"version": get_version()}
    )


def handle_concat(
    delimiter: str = "",
    paths: Optional[List[str]] = None,
    literals: Optional[List[Any]] = None,
    context: Any = None,
    root: str = "item",
    **kwargs,
) -> OperationResult[Dict[str, Any]]:
    """Build a Concat call from paths and literals and evaluate it once.

    Path getters come first, in order, followed by literal getters.
    """
    try:
        getters: List[Getter] = [PathGetter(path, root=root) for path in paths or []]
        getters.extend(LiteralGetter(value) for value in literals or [])

        registry = FunctionRegistry()
        expr = registry.bind("Concat", [delimiter, getters])
        ctx = TransformContext.from_document(context)
        result = expr(ctx)
        logger.debug("Concat over %d getters produced %d characters", len(getters), len(result))
        return OperationResult[Dict[str, Any]](
            success=True, data={"result": result, "getters": len(getters)}
        )
    except (TXException, ValueError) as e:
        return OperationResult[Dict[str, Any]](success=False, error=str(e))


def handle_list_functions(
    namespace: Optional[str] = None,
    **kwargs
) -> OperationResult[Dict[str, Any]]:
    """Handle listing available functions"""
    try:
        registry = FunctionRegistry()
        result = {
            "functions": registry.list_functions(namespace),
            "namespaces": registry.list_namespaces(),
            "namespace_filter": namespace,
        }
        return OperationResult[Dict[str, Any]](success=True, data=result)
    except ValueError as e:
        return OperationResult[Dict[str, Any]](
            success=False,
            error=f"Failed to list functions: {str(e)}"
        )


# Register all features
version_feature = FeatureRegistry.register(
    Feature(
        name="version",
        description="Get the telexform version",
        handler=handle_version,
        api_endpoint={"path": "/version", "methods": ["GET"]},
    )
)

concat_feature = FeatureRegistry.register(
    Feature(
        name="concat",
        description="Evaluate Concat over values read from a context document",
        handler=handle_concat,
        api_endpoint={"path": "/concat", "methods": ["POST"]},
    )
)

list_functions_feature = FeatureRegistry.register(
    Feature(
        name="list_functions",
        description="List available functions",
        handler=handle_list_functions,
        api_endpoint={"path": "/functions", "methods": ["GET"]},
    )
)
