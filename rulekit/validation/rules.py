"""Built-in Rules

Every evaluator has the registry signature
`(field, value, params, context) -> bool`.

Type rules (`boolean`, `integer`, `numeric`, `string`, `array`) are
implicit: they always run, pass for absent fields, and on success write
the canonical value back into the working data.
"""
from __future__ import annotations

import re
from decimal import Decimal
from email.utils import parseaddr
from typing import TYPE_CHECKING, Any, Mapping, Sequence
from urllib.parse import urlparse
from uuid import UUID

from .coercion import (
    ArrayCoercion,
    BooleanCoercion,
    CoercionRule,
    IntegerCoercion,
    NullPolicy,
    NumericCoercion,
    StringCoercion,
    is_numeric,
    to_number,
)
from .composition import nested, nested_collection
from .errors import InvalidParameterError, MissingParameterError
from .presence import exists
from .registry import RuleDefinition, RuleEvaluator

if TYPE_CHECKING:
    from .context import EvaluationContext
    from .parser import RuleSpec

NUMERIC_RULES = ("numeric", "integer")
SIZE_RULES = frozenset({"min", "max", "size", "between"})

_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_ALPHA_DASH = re.compile(r"^[\w-]+$")


def require_params(rule: str, params: Sequence[str], count: int) -> None:
    if len(params) < count:
        raise MissingParameterError(f"Rule '{rule}' requires at least {count} parameter(s)", rule=rule,
            given=len(params))


# ============================================================================
# Size helpers
# ============================================================================

def size_kind(value: Any, spec: RuleSpec) -> str:
    """How a size rule measures `value`: "numeric", "array" or "string"."""
    if isinstance(value, (list, tuple, Mapping)): return "array"
    if isinstance(value, bool): return "string"
    if isinstance(value, (int, float, Decimal)) or (spec.has(*NUMERIC_RULES) and is_numeric(value)): return "numeric"
    return "string"


def size_of(value: Any, spec: RuleSpec) -> int | float | None:
    """Measured size of `value`, or None when it has no meaningful size."""
    kind = size_kind(value, spec)
    if kind == "numeric": return to_number(value)
    if kind == "array" or isinstance(value, str): return len(value)
    return None


def _sized(field: str, value: Any, context: EvaluationContext) -> int | float | None:
    return size_of(value, context.rules_for(field))


def _number_param(rule: str, param: str) -> int | float:
    try:
        return to_number(param)
    except ValueError:
        raise InvalidParameterError(f"Rule '{rule}' expects a numeric parameter, got '{param}'", rule=rule,
            param=param) from None


def _int_param(rule: str, param: str) -> int:
    try:
        return int(param)
    except ValueError:
        raise InvalidParameterError(f"Rule '{rule}' expects an integer parameter, got '{param}'", rule=rule,
            param=param) from None


def _pattern(rule: str, param: str) -> re.Pattern:
    try:
        return re.compile(param)
    except re.error as e:
        raise InvalidParameterError(f"Rule '{rule}' has a malformed pattern: {e}", rule=rule, param=param) from None


# ============================================================================
# Presence rules (implicit)
# ============================================================================

def is_filled(value: Any) -> bool:
    if value is None: return False
    if isinstance(value, str): return value.strip() != ""
    if isinstance(value, (list, tuple, Mapping, set)): return len(value) > 0
    return True


def required(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return context.has(field) and is_filled(value)


def present(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return context.has(field)


def filled(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return not context.has(field) or is_filled(value)


def accepted(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return context.has(field) and (value is True or value == 1 and not isinstance(value, float)
        or (isinstance(value, str) and value.lower() in ("yes", "on", "1", "true")))


def bail(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    """Marker rule; the engine reads it from the RuleSpec."""
    return True


# ============================================================================
# Type rules (implicit, coercing)
# ============================================================================

def typed(coercion: CoercionRule) -> RuleEvaluator:
    """Evaluator for a primitive type backed by `coercion`."""

    def evaluate(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
        if not context.has(field):
            return True
        if value is None:
            if coercion.null_policy is NullPolicy.DROP:
                context.remove(field)
                return True
            return False
        result = coercion.coerce(value, field)
        if result.is_err():
            return False
        context.set(field, result.unwrap())
        return True

    evaluate.__name__ = coercion.name
    return evaluate


# ============================================================================
# Size rules
# ============================================================================

def min_(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("min", params, 1)
    size = _sized(field, value, context)
    return size is not None and size >= _number_param("min", params[0])


def max_(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("max", params, 1)
    size = _sized(field, value, context)
    return size is not None and size <= _number_param("max", params[0])


def size(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("size", params, 1)
    measured = _sized(field, value, context)
    return measured is not None and measured == _number_param("size", params[0])


def between(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("between", params, 2)
    measured = _sized(field, value, context)
    return measured is not None and _number_param("between", params[0]) <= measured <= _number_param("between", params[1])


# ============================================================================
# Membership and format rules
# ============================================================================

def _as_text(value: Any) -> str | None:
    if isinstance(value, bool): return "1" if value else "0"
    if isinstance(value, (str, int, float)): return str(value)
    return None


def _ascii_digits(text: str | None) -> bool:
    return text is not None and text.isascii() and text.isdigit()


def in_(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("in", params, 1)
    values = value if isinstance(value, (list, tuple)) else [value]
    return all(_as_text(v) in params for v in values)


def not_in(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("not_in", params, 1)
    values = value if isinstance(value, (list, tuple)) else [value]
    return not any(_as_text(v) in params for v in values)


def digits(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("digits", params, 1)
    length = _int_param("digits", params[0])
    text = _as_text(value)
    return _ascii_digits(text) and len(text) == length


def digits_between(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("digits_between", params, 2)
    low, high = _int_param("digits_between", params[0]), _int_param("digits_between", params[1])
    text = _as_text(value)
    return _ascii_digits(text) and low <= len(text) <= high


def email(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    if not isinstance(value, str): return False
    _, addr = parseaddr(value)
    return addr == value and _EMAIL.match(value) is not None


def url(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    if not isinstance(value, str): return False
    parsed = urlparse(value)
    schemes = params or ("http", "https")
    return parsed.scheme in schemes and bool(parsed.netloc)


def uuid(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    if isinstance(value, UUID): return True
    if not isinstance(value, str): return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def regex(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("regex", params, 1)
    pattern = _pattern("regex", params[0])
    text = _as_text(value)
    return text is not None and pattern.search(text) is not None


def not_regex(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("not_regex", params, 1)
    pattern = _pattern("not_regex", params[0])
    text = _as_text(value)
    return text is not None and pattern.search(text) is None


def alpha(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return isinstance(value, str) and value.isalpha()


def alpha_num(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    text = _as_text(value)
    return text is not None and text.isalnum()


def alpha_dash(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    text = _as_text(value)
    return text is not None and _ALPHA_DASH.match(text) is not None


# ============================================================================
# Cross-field rules
# ============================================================================

def same(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("same", params, 1)
    return context.has(params[0]) and context.get(params[0]) == value


def different(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    require_params("different", params, 1)
    return not context.has(params[0]) or context.get(params[0]) != value


def confirmed(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    return same(field, value, (f"{field}_confirmation",), context)


BUILTIN_RULES: tuple[RuleDefinition, ...] = (
    RuleDefinition("required", required, implicit=True),
    RuleDefinition("present", present, implicit=True),
    RuleDefinition("filled", filled, implicit=True),
    RuleDefinition("accepted", accepted, implicit=True),
    RuleDefinition("bail", bail),
    RuleDefinition("boolean", typed(BooleanCoercion()), implicit=True),
    RuleDefinition("integer", typed(IntegerCoercion()), implicit=True),
    RuleDefinition("numeric", typed(NumericCoercion()), implicit=True),
    RuleDefinition("string", typed(StringCoercion()), implicit=True),
    RuleDefinition("array", typed(ArrayCoercion()), implicit=True),
    RuleDefinition("min", min_),
    RuleDefinition("max", max_),
    RuleDefinition("size", size),
    RuleDefinition("between", between),
    RuleDefinition("in", in_),
    RuleDefinition("not_in", not_in),
    RuleDefinition("digits", digits),
    RuleDefinition("digits_between", digits_between),
    RuleDefinition("email", email),
    RuleDefinition("url", url),
    RuleDefinition("uuid", uuid),
    RuleDefinition("regex", regex),
    RuleDefinition("not_regex", not_regex),
    RuleDefinition("alpha", alpha),
    RuleDefinition("alpha_num", alpha_num),
    RuleDefinition("alpha_dash", alpha_dash),
    RuleDefinition("same", same),
    RuleDefinition("different", different),
    RuleDefinition("confirmed", confirmed),
    RuleDefinition("exists", exists),
    RuleDefinition("nested", nested),
    RuleDefinition("nested_collection", nested_collection),
)
