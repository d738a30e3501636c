"""Stable function API contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal

ParamKind = Literal["string", "getter_list"]
PARAM_KINDS = ("string", "getter_list")

# A built expression: evaluated once per context.
ExprFunc = Callable[[Any], Any]
FactoryFn = Callable[..., ExprFunc]


@dataclass(frozen=True)
class AritySpec:
    """Arity contract for function calls."""

    min_args: int
    max_args: int | None = None

    @classmethod
    def fixed(cls, count: int) -> "AritySpec":
        return cls(min_args=count, max_args=count)

    def validate(self, count: int) -> None:
        if count < self.min_args:
            raise ValueError(
                f"Expected at least {self.min_args} arguments, got {count}"
            )
        if self.max_args is not None and count > self.max_args:
            raise ValueError(
                f"Expected at most {self.max_args} arguments, got {count}"
            )


@dataclass(frozen=True)
class ParamSpec:
    name: str
    kind: ParamKind


@dataclass(frozen=True)
class FunctionSpec:
    """Function descriptor consumed by the registry and the argument binder."""

    name: str
    params: tuple[ParamSpec, ...]
    factory: FactoryFn
    namespace: str = "default"
    description: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}"

    @property
    def arity(self) -> AritySpec:
        return AritySpec.fixed(len(self.params))


def validate_spec(spec: FunctionSpec) -> None:
    """Validate a function spec before registration."""

    if not spec.name:
        raise ValueError("Function name cannot be empty")
    if "." in spec.name:
        raise ValueError("Function name must be unqualified")
    if not spec.namespace:
        raise ValueError("Function namespace cannot be empty")
    if not callable(spec.factory):
        raise ValueError(f"Function {spec.qualified_name} factory must be callable")
    for param in spec.params:
        if param.kind not in PARAM_KINDS:
            raise ValueError(f"Invalid parameter kind: {param.kind}")
