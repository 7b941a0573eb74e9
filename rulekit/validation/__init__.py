"""Declarative Rule Validation

Schemas are mappings of field name to pipe-delimited rules. A Validator
compiles them once and evaluates any number of payloads, coercing values
to canonical types and reporting failures by dotted path.

Key Features:
- Implicit type rules with per-type null handling
- Custom rules through a registry or the @rule decorator
- nested / nested_collection composition with path-prefixed failures
- Single-field extraction, pydantic Annotated types, FastAPI dependencies

Usage:
    from rulekit.validation import Validator, ValidationError

    simple = Validator({"age": "required|numeric|min:5", "size": "numeric|min:10"})
    order = Validator(
        {"items": "required|array|nested_collection:item"},
        validators={"item": simple},
    )

    try:
        data = order.parse(payload)
    except ValidationError as e:
        e.field_errors   # {"items.0.age": ["The age must be at least 5."]}
"""

from .coercion import (
    NullPolicy,
    CoercionRule,
    BooleanCoercion,
    IntegerCoercion,
    NumericCoercion,
    StringCoercion,
    ArrayCoercion,
    is_numeric,
    to_number,
)

from .parser import Rule, RuleSpec, parse_rule, parse_rules

from .registry import RuleDefinition, RuleRegistry, rule

from .messages import (
    MessageBag,
    FailureSet,
    MessageFormatter,
    DefaultMessageFormatter,
)

from .errors import (
    ValidationError,
    ValidationErrorDetail,
    ConfigurationError,
    UnknownRuleError,
    UnknownValidatorError,
    UnresolvableValidatorError,
    NotAValidatorError,
    MissingParameterError,
    NestingDepthError,
    InvalidFieldError,
    InvalidParameterError,
    MissingCollaboratorError,
)

from .context import EvaluationContext

from .engine import RuleSet, EvaluationResult, Validator

from .composition import Container, DefaultContainer

from .presence import PresenceVerifier, SqlAlchemyPresenceVerifier

from .extraction import FieldExtractor

from .annotated import Checked, rule_checked

from .boundaries import parse_ingress, parse_batch, validated_body, validated_query

__all__ = [
    # Coercion
    "NullPolicy",
    "CoercionRule",
    "BooleanCoercion",
    "IntegerCoercion",
    "NumericCoercion",
    "StringCoercion",
    "ArrayCoercion",
    "is_numeric",
    "to_number",
    # Rules
    "Rule",
    "RuleSpec",
    "parse_rule",
    "parse_rules",
    "RuleDefinition",
    "RuleRegistry",
    "rule",
    # Results
    "MessageBag",
    "FailureSet",
    "MessageFormatter",
    "DefaultMessageFormatter",
    # Errors
    "ValidationError",
    "ValidationErrorDetail",
    "ConfigurationError",
    "UnknownRuleError",
    "UnknownValidatorError",
    "UnresolvableValidatorError",
    "NotAValidatorError",
    "MissingParameterError",
    "NestingDepthError",
    "InvalidFieldError",
    "InvalidParameterError",
    "MissingCollaboratorError",
    # Engine
    "EvaluationContext",
    "RuleSet",
    "EvaluationResult",
    "Validator",
    "Container",
    "DefaultContainer",
    "PresenceVerifier",
    "SqlAlchemyPresenceVerifier",
    "FieldExtractor",
    # Integrations
    "Checked",
    "rule_checked",
    "parse_ingress",
    "parse_batch",
    "validated_body",
    "validated_query",
]
