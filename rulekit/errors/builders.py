"""Domain-Specific Error Builders

Ergonomic constructors for typed errors. Each builder creates an AppError
with the appropriate code and context, wrapped in Err.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Validation Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def invalid_type(field: str, expected: str, actual: object, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Cannot coerce {type(actual).__name__} to {expected}",
        code=ErrorCode.E2004_INVALID_TYPE,
        field=field or None,
        origin=origin,
        expected=expected,
        actual_type=type(actual).__name__,
    )


def invalid_format(field: str, expected: str, value: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"'{value}' is not a valid {expected}",
        code=ErrorCode.E2002_INVALID_FORMAT,
        field=field or None,
        value=value,
        origin=origin,
        expected=expected,
    )


# =============================================================================
# Database Errors (E4xxx)
# =============================================================================

def db_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E4000_DATABASE_GENERIC,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create database error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))


def query_failed(collection: str, cause: Exception, origin: str = "") -> Err[AppError]:
    return db_error(
        f"Presence query against '{collection}' failed: {cause}",
        code=ErrorCode.E4002_QUERY_FAILED,
        origin=origin,
        cause=cause,
        collection=collection,
    )


# =============================================================================
# Configuration Errors (E7xxx)
# =============================================================================

def configuration_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E7000_CONFIGURATION_GENERIC,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create configuration error (schema authoring bug, never bad input)."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in metadata.items() if v is not None},
    ))
