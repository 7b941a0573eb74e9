"""Coercion Primitives

One frozen rule per primitive type. Each rule answers two questions:
can this value be read as the type, and what is its canonical value.
Rules return Result so callers decide what a failure means; the engine
records a field failure and leaves the working value untouched.

Null handling is a per-type policy: `boolean`, `integer` and `numeric`
treat None as "field cleared" and drop it, `string` and `array` reject it.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

from rulekit.errors import AppError, Ok, Result, invalid_format, invalid_type

T = TypeVar("T")

_HEX = re.compile(r"[+-]?0[xX][0-9a-fA-F]+")
_BINARY = re.compile(r"[+-]?0[bB][01]+")
_OCTAL = re.compile(r"[+-]?0[oO]?[0-7]+")
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?(?:0|[1-9]\d*)")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def parse_numeric_string(value: str) -> int | float | None:
    """Parse the broad numeric-string grammar, or return None.

    Accepts hexadecimal (0x1F), binary (0b101), octal (017, 0o17) and decimal
    with optional fraction and exponent. Integer forms give int, anything
    with a fraction or exponent gives float.
    """
    text = value.strip()
    if _HEX.fullmatch(text): return int(text, 16)
    if _BINARY.fullmatch(text): return int(text, 2)
    if _OCTAL.fullmatch(text): return int(text, 8)
    if _DECIMAL.fullmatch(text):
        return float(text) if any(c in text for c in ".eE") else int(text)
    return None


def is_numeric(value: Any) -> bool:
    if _is_number(value): return True
    return isinstance(value, str) and parse_numeric_string(value) is not None


def to_number(value: Any) -> int | float | Decimal:
    """Numeric value of `value`; raises ValueError when it is not numeric."""
    if _is_number(value): return value
    if isinstance(value, str) and (parsed := parse_numeric_string(value)) is not None: return parsed
    raise ValueError(f"{value!r} is not numeric")


class NullPolicy(str, Enum):
    """What a type rule does with an explicit None."""
    DROP = "drop"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[T]):
    """Base class for primitive type coercions."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name this coercion backs."""

    @property
    @abstractmethod
    def null_policy(self) -> NullPolicy:
        """Treatment of an explicit None."""

    @abstractmethod
    def can_coerce(self, value: Any) -> bool:
        """Check if value can be read as the target type."""

    @abstractmethod
    def canonical(self, value: Any) -> T:
        """Canonical representation; only called when can_coerce(value) holds."""

    def coerce(self, value: Any, field: str = "") -> Result[T, AppError]:
        if not self.can_coerce(value):
            if isinstance(value, str): return invalid_format(field, self.name, value, origin="coercion")
            return invalid_type(field, self.name, value, origin="coercion")
        return Ok(self.canonical(value))

    def __call__(self, value: Any) -> Result[T, AppError]:
        return self.coerce(value)


@dataclass(frozen=True, slots=True)
class BooleanCoercion(CoercionRule[bool]):
    """True/False, 0/1 and "0"/"1"."""

    @property
    def name(self) -> str: return "boolean"

    @property
    def null_policy(self) -> NullPolicy: return NullPolicy.DROP

    def can_coerce(self, value: Any) -> bool:
        if isinstance(value, bool): return True
        if isinstance(value, int): return value in (0, 1)
        return isinstance(value, str) and value in ("0", "1")

    def canonical(self, value: Any) -> bool:
        return bool(int(value))


@dataclass(frozen=True, slots=True)
class IntegerCoercion(CoercionRule[int]):
    """Whole numbers: ints, integral floats and plain decimal integer strings."""

    @property
    def name(self) -> str: return "integer"

    @property
    def null_policy(self) -> NullPolicy: return NullPolicy.DROP

    def can_coerce(self, value: Any) -> bool:
        if isinstance(value, bool): return False
        if isinstance(value, int): return True
        if isinstance(value, float): return value.is_integer()
        return isinstance(value, str) and _INTEGER.fullmatch(value.strip()) is not None

    def canonical(self, value: Any) -> int:
        return int(value.strip()) if isinstance(value, str) else int(value)


@dataclass(frozen=True, slots=True)
class NumericCoercion(CoercionRule[int | float | Decimal]):
    """Any number, or a string in the broad numeric grammar."""

    @property
    def name(self) -> str: return "numeric"

    @property
    def null_policy(self) -> NullPolicy: return NullPolicy.DROP

    def can_coerce(self, value: Any) -> bool: return is_numeric(value)

    def canonical(self, value: Any) -> int | float | Decimal: return to_number(value)


@dataclass(frozen=True, slots=True)
class StringCoercion(CoercionRule[str]):

    @property
    def name(self) -> str: return "string"

    @property
    def null_policy(self) -> NullPolicy: return NullPolicy.FAIL

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def canonical(self, value: Any) -> str: return value


@dataclass(frozen=True, slots=True)
class ArrayCoercion(CoercionRule[list | dict]):
    """Lists, tuples (canonicalized to lists) and mappings."""

    @property
    def name(self) -> str: return "array"

    @property
    def null_policy(self) -> NullPolicy: return NullPolicy.FAIL

    def can_coerce(self, value: Any) -> bool: return isinstance(value, (list, tuple, Mapping))

    def canonical(self, value: Any) -> list | Mapping:
        return list(value) if isinstance(value, tuple) else value

