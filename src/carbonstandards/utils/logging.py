"""
Structured logging configuration using structlog.

Log lines go to stderr so that console tables printed on stdout stay
clean. PyMC, PyTensor and ArviZ log through the standard library and are
held at WARNING unless DEBUG is requested.
"""

import logging
import sys
from typing import Any

import structlog

_SAMPLER_LOGGERS = ("pymc", "pytensor", "arviz")

# Significant digits kept for float values in log events
_FLOAT_DIGITS = 6


def _round_floats(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Round float values so posterior estimates stay readable."""
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = float(f"{value:.{_FLOAT_DIGITS}g}")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Emit one JSON object per line instead of console text.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(name)s: %(message)s", stream=sys.stderr, level=log_level)
    sampler_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in _SAMPLER_LOGGERS:
        logging.getLogger(name).setLevel(sampler_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _round_floats,
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, typically with name=__name__."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key-value pairs to every log event inside the block.

    Example:
        with log_context(standard="ACET-1", stage="pre"):
            log.info("Fitting model")  # includes standard and stage
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
