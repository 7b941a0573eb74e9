"""Monadic Error Handling System

Key components:
- Result[T, E]: Monadic container for success/failure
- AppError: Base error type with full context
- ErrorCode: Hierarchical error code taxonomy
- Builder functions: Ergonomic error construction
- FastAPI handlers: AppError / ValidationError to JSON responses

Usage:
    from rulekit.errors import Ok, Err, Result, AppError

    match validator.parse_result(payload):
        case Ok(data):
            handle(data)
        case Err(error):
            log.warning("payload_rejected", errors=error.messages.messages())
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    AppErrorException,
    ErrorCode,
    ErrorContext,
    ok,
    err,
    collect_results,
)

from .builders import (
    validation_error,
    invalid_type,
    invalid_format,
    db_error,
    query_failed,
    configuration_error,
)

from .handlers import (
    register_error_handlers,
    result_to_response,
    raise_error,
)

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "AppError",
    "AppErrorException",
    "ErrorCode",
    "ErrorContext",
    "ok",
    "err",
    "collect_results",
    # Builders
    "validation_error",
    "invalid_type",
    "invalid_format",
    "db_error",
    "query_failed",
    "configuration_error",
    # Handlers
    "register_error_handlers",
    "result_to_response",
    "raise_error",
]
