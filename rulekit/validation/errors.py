"""Validation and Configuration Errors

Two distinct error kinds:

1. ValidationError: expected, data-driven. Raised only by `parse`-style
   operations and carries the full FailureSet and MessageBag so callers
   can recover field by field without re-running validation.
2. ConfigurationError: a schema authoring bug (unknown rule, unresolvable
   sub-validator, missing composition parameter, runaway nesting). Always
   raised immediately, never converted into a field failure.

Error Format (ValidationError.to_dict):
{
    "error": {
        "type": "validation_error",
        "message": "The age must be at least 5.",
        "error_count": 1,
        "errors": {"nested.age": ["The age must be at least 5."]},
        "failed": {"nested.age": {"min": ["5"]}}
    }
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rulekit.errors import AppError, ErrorCode, ErrorContext
from .messages import FailureSet, MessageBag


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """One failed rule at one path, flattened for API consumers."""
    field_path: str
    constraint: str
    params: tuple[str, ...] = ()
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field_path, "constraint": self.constraint, "message": self.message}
        if self.params: result["params"] = list(self.params)
        return result


@dataclass
class ValidationError(Exception):
    """Validation failure with the structured result of the evaluation."""
    failures: FailureSet = field(default_factory=FailureSet)
    messages: MessageBag = field(default_factory=MessageBag)
    message: str = "Validation failed"

    def __post_init__(self):
        super().__init__(str(self))

    def __str__(self) -> str:
        return ";".join(self.messages.all()) or self.message

    @property
    def details(self) -> list[ValidationErrorDetail]:
        """One detail per failed rule; messages are paired by position within a path."""
        result: list[ValidationErrorDetail] = []
        for path, rules in self.failures.items():
            texts = self.messages.get(path)
            for index, (rule, params) in enumerate(rules.items()):
                result.append(ValidationErrorDetail(field_path=path, constraint=rule, params=params,
                    message=texts[index] if index < len(texts) else ""))
        return result

    @property
    def field_errors(self) -> dict[str, list[str]]:
        """Messages grouped by field path."""
        return self.messages.messages()

    def get_errors_for_field(self, field_path: str) -> list[str]: return self.messages.get(field_path)

    def to_app_error(self) -> AppError:
        """Convert to AppError for the error handling system."""
        if len(self.failures) == 1:
            d = self.details[0]
            return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=f"{d.field_path}: {d.message}",
                context=ErrorContext(origin="validation"),
                metadata={"field": d.field_path, "constraint": d.constraint, "errors": self.field_errors})
        return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC,
            message=f"Validation failed: {len(self.failures)} fields",
            context=ErrorContext(origin="validation"),
            metadata={"error_count": len(self.failures), "errors": self.field_errors})

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for API responses."""
        return {"error": {"type": "validation_error", "message": self.messages.first() or self.message,
            "error_count": self.messages.count(), "errors": self.field_errors, "failed": self.failures.to_dict()}}


class ConfigurationError(Exception):
    """Schema authoring bug. Distinct from ValidationError and never swallowed."""

    code = ErrorCode.E7000_CONFIGURATION_GENERIC

    def __init__(self, message: str, **metadata):
        self.error = AppError(code=self.code, message=message, context=ErrorContext(origin="validation"),
            metadata={k: v for k, v in metadata.items() if v is not None})
        super().__init__(message)


class UnknownRuleError(ConfigurationError):
    """A rule name with no registered evaluator."""
    code = ErrorCode.E7001_UNKNOWN_RULE


class UnknownValidatorError(ConfigurationError):
    """A composition rule names a sub-validator that was never registered."""
    code = ErrorCode.E7002_UNKNOWN_VALIDATOR


class UnresolvableValidatorError(ConfigurationError):
    """The container could not build the registered sub-validator reference."""
    code = ErrorCode.E7003_UNRESOLVABLE_VALIDATOR


class NotAValidatorError(ConfigurationError):
    """The resolved sub-validator does not implement the validator capability."""
    code = ErrorCode.E7004_NOT_A_VALIDATOR


class MissingParameterError(ConfigurationError):
    """A rule was declared without the parameters it needs."""
    code = ErrorCode.E7005_MISSING_RULE_PARAMETER


class NestingDepthError(ConfigurationError):
    """Composition recursed past the configured depth (usually a self-nesting schema)."""
    code = ErrorCode.E7006_NESTING_TOO_DEEP


class InvalidFieldError(ConfigurationError):
    """A declared field name is empty or dotted."""
    code = ErrorCode.E7007_INVALID_FIELD_NAME


class MissingCollaboratorError(ConfigurationError):
    """A rule needs a collaborator (e.g. a presence verifier) the validator was not given."""
    code = ErrorCode.E7008_MISSING_COLLABORATOR


class InvalidParameterError(ConfigurationError):
    """A rule parameter is present but unusable (non-numeric size, malformed pattern)."""
    code = ErrorCode.E7009_INVALID_RULE_PARAMETER
