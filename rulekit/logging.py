"""Structured Logging for rulekit

- Colored, human-readable dev output
- JSON structured production output
- Context propagation via contextvars
- Redaction of sensitive keys (validated payloads often carry credentials)
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

SENSITIVE_KEYS = frozenset({"password", "password_confirmation", "token", "secret", "authorization", "cookie"})


def _censor_sensitive_keys(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that redacts sensitive information."""

    def _redact(obj, depth: int = 0):
        if depth > 5:
            return obj
        if isinstance(obj, dict):
            return {
                k: "[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else _redact(v, depth + 1)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [_redact(item, depth + 1) for item in obj]
        return obj

    return _redact(event_dict)


def _add_service_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that adds service metadata."""
    event_dict.setdefault("service", "rulekit")
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors used in both dev and prod configurations."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_service_info,
        _censor_sensitive_keys,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure the logging system.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON format (for production). If False, colored console output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = get_shared_processors()

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    # Formatter for stdlib logger (handles logs from third-party libs)
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Bind key-value pairs to the current logging context.

    Useful for tagging every validation log line of a request with its id.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


class LoggerRegistry:
    """Registry of pre-configured loggers for the library's domains."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for the given domain."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"rulekit.{name}")
        return cls._loggers[name]


def validation_logger() -> structlog.stdlib.BoundLogger:
    """Logger for rule evaluation and composition events."""
    return LoggerRegistry.get("validation")


def db_logger() -> structlog.stdlib.BoundLogger:
    """Logger for presence verification queries."""
    return LoggerRegistry.get("db")


def api_logger() -> structlog.stdlib.BoundLogger:
    """Logger for HTTP boundary events."""
    return LoggerRegistry.get("api")
