"""Structured Logging for typed_support

Same shape as an application logging setup, scaled to a library:
- Colored, human-readable console output
- JSON structured output
- Shared processors for stdlib and structlog loggers
- Lazy default configuration when the host application configured nothing
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from typed_support.core.config import get_settings


def _add_library_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that tags events with the emitting library."""
    event_dict.setdefault("library", "typed_support")
    return event_dict


def _drop_color_message_key(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop internal structlog key that's added for colored console output."""
    event_dict.pop("_color_message", None)
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors used in both console and JSON configurations."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_library_info,
        _drop_color_message_key,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON format. If False, colored console output.
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


def _ensure_configured() -> None:
    """Apply a level-filtered default when nobody configured structlog."""
    if structlog.is_configured():
        return
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_library_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Configured structlog logger
    """
    _ensure_configured()
    return structlog.get_logger(name)


class LoggerRegistry:
    """Registry of loggers for the library's layers."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for the given layer."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"typed_support.{name}")
        return cls._loggers[name]


def attributes_logger() -> structlog.stdlib.BoundLogger:
    """Logger for attribute declaration and coercion events."""
    return LoggerRegistry.get("attributes")


def forms_logger() -> structlog.stdlib.BoundLogger:
    """Logger for mapping-layer (form model) events."""
    return LoggerRegistry.get("forms")


def schemas_logger() -> structlog.stdlib.BoundLogger:
    """Logger for schema definition and rendering events."""
    return LoggerRegistry.get("schemas")
