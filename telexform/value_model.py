"""Transformation-language value model and fragment rendering."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any
import math


NIL_FRAGMENT = "<nil>"

# Shortest-form floats switch to exponent notation outside [-4, 6).
_FLOAT_MIN_FIXED_EXP = -4
_FLOAT_MAX_FIXED_EXP = 6

# Integers outside the signed 64-bit range are not scalars of the language.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def normalize_path(path: str | None) -> str:
    raw = str(path or "").strip()
    if not raw or raw == "/":
        return ""
    if raw.startswith("/"):
        return raw
    return f"/{raw}"


def _decode_path_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def path_tokens(path: str) -> list[str]:
    normalized = normalize_path(path)
    if not normalized:
        return []
    return [_decode_path_token(token) for token in normalized.split("/")[1:]]


def format_float(number: float) -> str:
    """Render a float with its shortest round-trip digits.

    Fixed notation is used while the decimal exponent stays in [-4, 6);
    beyond that the value is written as ``d.ddde±XX``:

    - ``3.14159`` -> ``"3.14159"``
    - ``2.0`` -> ``"2"``
    - ``1e6`` -> ``"1e+06"``
    """
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    if number == 0:
        return "-0" if math.copysign(1.0, number) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(number)).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    while len(digits) > 1 and digits[0] == 0:
        digits.pop(0)
    text = "".join(str(d) for d in digits)
    decimal_exp = len(digits) + exponent - 1
    prefix = "-" if sign else ""

    if decimal_exp < _FLOAT_MIN_FIXED_EXP or decimal_exp >= _FLOAT_MAX_FIXED_EXP:
        mantissa = text[0]
        if len(text) > 1:
            mantissa = f"{text[0]}.{text[1:]}"
        exp_sign = "-" if decimal_exp < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(decimal_exp):02d}"

    point = decimal_exp + 1
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{text}"
    if point >= len(text):
        return f"{prefix}{text}{'0' * (point - len(text))}"
    return f"{prefix}{text[:point]}.{text[point:]}"


class TxValue(ABC):
    """Tagged wrapper around a value produced by a getter."""

    kind: str = "unknown"

    def __init__(self, raw: Any):
        self.raw = raw

    @abstractmethod
    def to_fragment(self) -> str:
        """Return the text this value contributes to a concatenation."""

    @property
    def renderable(self) -> bool:
        return True

    def resolve(self, *, path: str = "") -> "TxValue":
        """Descend into the value; scalars only resolve the empty path."""
        if not path_tokens(path):
            return self
        return TxNullValue(None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.raw!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TxValue):
            return NotImplemented
        return self.kind == other.kind and self.raw == other.raw


class TxNullValue(TxValue):
    kind = "null"

    def to_fragment(self) -> str:
        return NIL_FRAGMENT


class TxStringValue(TxValue):
    kind = "string"

    def to_fragment(self) -> str:
        return self.raw


class TxIntegerValue(TxValue):
    kind = "integer"

    def to_fragment(self) -> str:
        return str(int(self.raw))


class TxFloatValue(TxValue):
    kind = "float"

    def to_fragment(self) -> str:
        return format_float(float(self.raw))


class TxBooleanValue(TxValue):
    kind = "boolean"

    def to_fragment(self) -> str:
        return "true" if self.raw else "false"


class TxBytesValue(TxValue):
    kind = "bytes"

    def to_fragment(self) -> str:
        return bytes(self.raw).hex()


class TxCompositeValue(TxValue):
    """Lists, mappings, nested structures and any other non-scalar value.

    There is no canonical single-line text form for these, so they render as
    an empty fragment.
    """

    kind = "composite"

    def to_fragment(self) -> str:
        return ""

    @property
    def renderable(self) -> bool:
        return False

    def resolve(self, *, path: str = "") -> TxValue:
        tokens = path_tokens(path)
        if not tokens:
            return self
        node = self.raw
        for token in tokens:
            if isinstance(node, TxCompositeValue):
                node = node.raw
            node = _child(node, token)
            if node is _MISSING:
                return TxNullValue(None)
        return adapt_runtime_value(node)


_MISSING = object()


def _child(container: Any, token: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(token, _MISSING)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes, bytearray)):
        try:
            index = int(token)
        except ValueError:
            return _MISSING
        if index < 0 or index >= len(container):
            return _MISSING
        return container[index]
    return _MISSING


def adapt_runtime_value(value: Any) -> TxValue:
    """Adapt a native runtime value to the closed transformation value model."""
    if isinstance(value, TxValue):
        return value
    if value is None:
        return TxNullValue(value)
    if isinstance(value, bool):
        return TxBooleanValue(value)
    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return TxIntegerValue(value)
        return TxCompositeValue(value)
    if isinstance(value, float):
        return TxFloatValue(value)
    if isinstance(value, str):
        return TxStringValue(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return TxBytesValue(value)
    return TxCompositeValue(value)


def render_fragment(value: Any) -> str:
    return adapt_runtime_value(value).to_fragment()
