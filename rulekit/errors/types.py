"""Monadic Error Handling Types

Result/Either types for composable error propagation, and the error code
taxonomy shared by the validation engine, the presence verifier and the
HTTP boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Generic, Iterator, NoReturn, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E2xxx: Validation errors (bad input)
    E4xxx: Database errors (presence verification)
    E7xxx: Configuration errors (schema authoring bugs)
    E9xxx: Internal/Unknown errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2002_INVALID_FORMAT = 2002
    E2004_INVALID_TYPE = 2004
    E2021_INVALID_JSON = 2021

    # Database (E4xxx)
    E4000_DATABASE_GENERIC = 4000
    E4002_QUERY_FAILED = 4002

    # Configuration (E7xxx)
    E7000_CONFIGURATION_GENERIC = 7000
    E7001_UNKNOWN_RULE = 7001
    E7002_UNKNOWN_VALIDATOR = 7002
    E7003_UNRESOLVABLE_VALIDATOR = 7003
    E7004_NOT_A_VALIDATOR = 7004
    E7005_MISSING_RULE_PARAMETER = 7005
    E7006_NESTING_TOO_DEEP = 7006
    E7007_INVALID_FIELD_NAME = 7007
    E7008_MISSING_COLLABORATOR = 7008
    E7009_INVALID_RULE_PARAMETER = 7009

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001

    @property
    def http_status(self) -> int:
        """Map error code to appropriate HTTP status."""
        code = self.value
        if 2000 <= code < 2100:
            return 400
        if 4000 <= code < 4100:
            return 503
        return 500

    @property
    def category(self) -> str:
        """Human-readable error category."""
        code = self.value
        if 2000 <= code < 3000:
            return "validation"
        if 4000 <= code < 5000:
            return "database"
        if 7000 <= code < 8000:
            return "configuration"
        return "internal"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Immutable context for error tracing and debugging."""
    correlation_id: str = field(default_factory=lambda: str(uuid4())[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    origin: str = ""
    request_id: str | None = None


@dataclass(frozen=True, slots=True)
class AppError:
    """Base application error with full context.

    All errors carry:
    - Typed error code from taxonomy
    - Human-readable message
    - Structured metadata for debugging
    - Tracing context
    - Optional cause for error chaining
    """
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None

    def with_context(self, **kwargs) -> AppError:
        """Create new error with updated context."""
        new_ctx = ErrorContext(
            correlation_id=kwargs.get("correlation_id") or self.context.correlation_id,
            timestamp=self.context.timestamp,
            origin=kwargs.get("origin", self.context.origin),
            request_id=kwargs.get("request_id", self.context.request_id),
        )
        return AppError(
            code=self.code,
            message=self.message,
            context=new_ctx,
            metadata={**self.metadata, **kwargs.get("metadata", {})},
            cause=self.cause,
        )

    def with_metadata(self, **kwargs) -> AppError:
        """Create new error with additional metadata."""
        return AppError(
            code=self.code,
            message=self.message,
            context=self.context,
            metadata={**self.metadata, **kwargs},
            cause=self.cause,
        )

    def to_dict(self) -> dict:
        """Serialize error for API responses."""
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "message": self.message,
                "category": self.code.category,
                "correlation_id": self.context.correlation_id,
                "timestamp": self.context.timestamp.isoformat(),
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (correlation_id={self.context.correlation_id})"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result monad."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        return self  # type: ignore

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain operations that may fail."""
        return f(self.value)

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result monad."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises because Err has no value to unwrap."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return self  # type: ignore

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the error."""
        return Err(f(self.error))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return self  # type: ignore

    def __iter__(self) -> Iterator:
        return iter([])


# Type alias for Result monad
Result = Union[Ok[T], Err[E]]


def ok(value: T) -> Ok[T]:
    """Construct Ok variant."""
    return Ok(value)


def err(error: E) -> Err[E]:
    """Construct Err variant."""
    return Err(error)


def collect_results(results: list[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect list of Results into Result of list.

    Returns Ok with all values if all are Ok.
    Returns Err with all errors if any are Err.
    """
    values: list[T] = []
    errors: list[E] = []

    for r in results:
        match r:
            case Ok(v):
                values.append(v)
            case Err(e):
                errors.append(e)

    if errors:
        return Err(errors)
    return Ok(values)


class AppErrorException(Exception):
    """Exception wrapper for AppError.

    Use this when an AppError has to cross code that does not use the
    Result monad (FastAPI dependencies, presence verifier queries).
    """

    def __init__(self, error: AppError):
        self.error = error
        super().__init__(str(error))
