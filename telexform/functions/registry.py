"""Deterministic function discovery, resolution and argument binding."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Sequence
from pathlib import Path
from typing import Any
import importlib
import logging

from telexform.error_msg import ArgumentBindingError, Stack, UnknownFunctionError
from telexform.functions.api import ExprFunc, FunctionSpec, ParamSpec, validate_spec
from telexform.getters import Getter

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Registry with deterministic namespace loading and name resolution."""

    def __init__(self, functions_dir: Path | None = None) -> None:
        if functions_dir is None:
            functions_dir = Path(__file__).parent

        self.functions_dir = functions_dir
        self._specs_by_qualified: OrderedDict[str, FunctionSpec] = OrderedDict()
        self._specs_by_namespace: dict[str, OrderedDict[str, FunctionSpec]] = {}
        self._loaded_namespaces: set[str] = set()

        self._discover_namespaces()

    def _discover_namespaces(self) -> None:
        if not self.functions_dir.exists():
            return
        for item in sorted(self.functions_dir.iterdir(), key=lambda p: p.name):
            if not item.is_dir() or item.name.startswith("_"):
                continue
            self._load_namespace(item.name)

    def _load_namespace(self, namespace: str) -> None:
        if namespace in self._loaded_namespaces:
            return

        namespace_dir = self.functions_dir / namespace
        if not namespace_dir.exists() or not namespace_dir.is_dir():
            raise ValueError(f"Unknown function namespace: {namespace}")

        module_path = f"telexform.functions.{namespace}"
        for py_file in sorted(namespace_dir.glob("*.py"), key=lambda p: p.name):
            if py_file.name.startswith("_"):
                continue
            module_name = f"{module_path}.{py_file.stem}"
            try:
                module = importlib.import_module(module_name)
            except Exception as exc:
                logger.warning(
                    "Failed loading function module %s: %s", module_name, exc
                )
                continue

            spec = getattr(module, "FUNCTION_SPEC", None)
            if spec is None:
                continue
            if not isinstance(spec, FunctionSpec):
                raise TypeError(f"{module_name}.FUNCTION_SPEC must be FunctionSpec")
            if spec.namespace != namespace:
                raise ValueError(
                    f"{module_name} declares namespace '{spec.namespace}', expected '{namespace}'"
                )
            self.register(spec)

        self._specs_by_namespace.setdefault(namespace, OrderedDict())
        self._loaded_namespaces.add(namespace)
        logger.debug("Loaded function namespace %s", namespace)

    def register(self, spec: FunctionSpec) -> None:
        validate_spec(spec)

        qualified_name = spec.qualified_name
        if qualified_name in self._specs_by_qualified:
            raise ValueError(f"Function already registered: {qualified_name}")

        self._specs_by_qualified[qualified_name] = spec
        self._specs_by_namespace.setdefault(spec.namespace, OrderedDict())[spec.name] = spec

    def resolve(self, name: str) -> FunctionSpec:
        if "." in name:
            namespace, function_name = name.split(".", 1)
            if namespace and function_name and namespace in self._specs_by_namespace:
                qualified = f"{namespace}.{function_name}"
                if qualified not in self._specs_by_qualified:
                    raise UnknownFunctionError(f"Unknown function: {qualified}")
                return self._specs_by_qualified[qualified]

        for namespace in sorted(self._specs_by_namespace.keys()):
            specs = self._specs_by_namespace[namespace]
            if name in specs:
                return specs[name]

        raise UnknownFunctionError(f"Unknown function: {name}")

    def bind(self, name: str, args: Sequence[Any]) -> ExprFunc:
        """Check ``args`` against the function's parameters and build it.

        This is the only place a function call can be rejected; the built
        expression itself never fails on the values it sees.
        """
        spec = self.resolve(name)
        try:
            spec.arity.validate(len(args))
        except ValueError as exc:
            raise ArgumentBindingError(
                f"{spec.name}: {exc}", [(spec.qualified_name, "call")]
            ) from exc

        bound = [
            _bind_argument(spec, index, param, arg)
            for index, (param, arg) in enumerate(zip(spec.params, args))
        ]
        logger.debug("Bound %s with %d arguments", spec.qualified_name, len(bound))
        return spec.factory(*bound)

    def list_namespaces(self) -> list[str]:
        return sorted(self._specs_by_namespace.keys())

    def list_functions(self, namespace_name: str | None = None) -> dict[str, str]:
        if namespace_name is not None:
            if namespace_name not in self._loaded_namespaces:
                self._load_namespace(namespace_name)
            selected = self._specs_by_namespace.get(namespace_name, OrderedDict())
            return {
                name: spec.description or "Function"
                for name, spec in selected.items()
            }

        output: dict[str, str] = {}
        for namespace in self.list_namespaces():
            for function_name, spec in self._specs_by_namespace[namespace].items():
                output[f"{namespace}.{function_name}"] = spec.description or "Function"
        return output


def _bind_argument(spec: FunctionSpec, index: int, param: ParamSpec, arg: Any) -> Any:
    position: Stack = [(spec.qualified_name, f"argument {index} ({param.name})")]

    if param.kind == "string":
        if not isinstance(arg, str):
            raise ArgumentBindingError(
                f"{spec.name}: expected a string for '{param.name}', got {type(arg).__name__}",
                position,
            )
        return arg

    if isinstance(arg, (str, bytes)) or not isinstance(arg, Sequence):
        raise ArgumentBindingError(
            f"{spec.name}: expected a list of getters for '{param.name}', got {type(arg).__name__}",
            position,
        )
    for item_index, item in enumerate(arg):
        if not isinstance(item, Getter):
            raise ArgumentBindingError(
                f"{spec.name}: element {item_index} of '{param.name}' is {type(item).__name__}, not a getter",
                position,
            )
    return list(arg)
