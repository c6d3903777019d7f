"""Structured logging for the forecasting engine.

Orchestrators bind the call they are serving (model, horizon, series length)
with ``structlog.contextvars``, so events emitted deep inside a model fit
carry the same fields as the service's own start/complete events.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

import numpy as np
import structlog

from forecast_engine.core.config import Settings, get_settings


def coerce_numpy_scalars(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace numpy scalars with the equivalent Python numbers.

    Model code logs fitted coefficients, orders and scores straight from
    numpy; JSON rendering would otherwise repr() integer and bool scalars.
    """
    for key, value in event_dict.items():
        if isinstance(value, np.generic):
            event_dict[key] = value.item()
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the engine.

    Args:
        settings: Settings instance; the cached singleton when omitted.
    """
    settings = settings or get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        coerce_numpy_scalars,
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=settings.is_development)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=not settings.is_testing,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger; bound call context is merged on emit.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger
