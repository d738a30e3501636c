"""Transform context handed to getters at evaluation time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

CONTEXT_ROOTS = ("item", "resource", "instrumentation_scope")


@dataclass(frozen=True)
class TransformContext:
    """The telemetry record being transformed plus its enclosing scopes."""

    item: Any = None
    resource: Mapping[str, Any] = field(default_factory=dict)
    instrumentation_scope: Mapping[str, Any] = field(default_factory=dict)

    def root(self, name: str) -> Any:
        if name not in CONTEXT_ROOTS:
            raise ValueError(f"Unknown context root: {name}")
        return getattr(self, name)

    @classmethod
    def from_document(cls, document: Any) -> "TransformContext":
        """Build a context from a decoded JSON document.

        A mapping carrying any of the root keys is split across them; any other
        document becomes the item.
        """
        if isinstance(document, Mapping) and any(key in document for key in CONTEXT_ROOTS):
            return cls(
                item=document.get("item"),
                resource=document.get("resource") or {},
                instrumentation_scope=document.get("instrumentation_scope") or {},
            )
        return cls(item=document)
