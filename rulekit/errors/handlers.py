"""FastAPI Exception Handlers

Converts AppErrors, validation failures and schema configuration errors
raised inside request handling into HTTP responses.
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rulekit.logging import api_logger

from .types import AppError, AppErrorException, ErrorCode, ErrorContext

log = api_logger()


def _request_context(request: Request) -> dict[str, str]:
    return {
        "correlation_id": request.headers.get("X-Correlation-ID", ""),
        "request_id": request.headers.get("X-Request-ID", ""),
    }


def result_to_response(error: AppError) -> JSONResponse:
    """Convert AppError to FastAPI JSONResponse."""
    status_code = error.code.http_status

    log_method = log.warning if status_code < 500 else log.error
    log_method(
        "error_response",
        error_code=error.code.name,
        error_code_num=error.code.value,
        message=error.message,
        category=error.code.category,
        correlation_id=error.context.correlation_id,
        origin=error.context.origin,
        metadata=error.metadata,
    )

    return JSONResponse(status_code=status_code, content=error.to_dict())


async def app_error_handler(request: Request, exc: AppErrorException) -> JSONResponse:
    """Handle AppErrorException raised in route handlers and dependencies."""
    ctx = _request_context(request)
    error = exc.error.with_context(
        request_id=ctx["request_id"],
        correlation_id=ctx["correlation_id"] or exc.error.context.correlation_id,
    )
    return result_to_response(error)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle ValidationError: 400 with every failing path and its messages."""
    from rulekit.validation.errors import ValidationError

    if not isinstance(exc, ValidationError):
        raise exc

    error = exc.to_app_error().with_context(origin="validation", **_request_context(request))
    log.warning(
        "validation_rejected",
        error_count=exc.messages.count(),
        paths=exc.failures.paths(),
        correlation_id=error.context.correlation_id,
    )
    return JSONResponse(status_code=error.code.http_status, content=exc.to_dict())


async def configuration_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle ConfigurationError: a broken schema is a server fault."""
    from rulekit.validation.errors import ConfigurationError

    if not isinstance(exc, ConfigurationError):
        raise exc

    error = exc.error.with_context(origin="configuration", **_request_context(request))
    return result_to_response(error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: convert to an internal error and log the traceback."""
    from rulekit.validation.errors import ConfigurationError, ValidationError

    if isinstance(exc, ValidationError):
        return await validation_error_handler(request, exc)
    if isinstance(exc, ConfigurationError):
        return await configuration_error_handler(request, exc)

    error = AppError(
        code=ErrorCode.E9001_UNEXPECTED_ERROR,
        message="An unexpected error occurred",
        context=ErrorContext(correlation_id=request.headers.get("X-Correlation-ID", ""), origin="unhandled"),
        cause=exc,
    )
    log.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        correlation_id=error.context.correlation_id,
    )
    return result_to_response(error)


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on a FastAPI app.

    Usage:
        app = FastAPI()
        register_error_handlers(app)
    """
    from rulekit.validation.errors import ConfigurationError, ValidationError

    app.add_exception_handler(AppErrorException, app_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def raise_error(error: AppError) -> None:
    """Raise AppError as exception, for code that does not use the Result monad."""
    raise AppErrorException(error)
