"""Structured logging for the catalog API, CLI and report pipeline."""

import logging
from typing import Any, List

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.types import Processor

# Environments where logs are read by a person rather than collected.
CONSOLE_ENVIRONMENTS = frozenset({"development", "local"})


def build_processors(environment: str = "production") -> List[Processor]:
    """Processor chain; the final renderer depends on ``environment``."""
    renderer: Processor
    if environment.lower() in CONSOLE_ENVIRONMENTS:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()
    return [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(level: str = "INFO", environment: str = "production") -> None:
    logging.basicConfig(level=level.upper())
    structlog.configure(
        processors=build_processors(environment),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def log_context(**values: Any):
    """Bind ``values`` to every event logged inside the ``with`` block.

    Used by the API to tag events with the request path and method.
    """
    return bound_contextvars(**values)


def get_logger(*args: Any, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(*args, **kwargs)


__all__ = ["build_processors", "configure_logging", "get_logger", "log_context"]
