"""Structured logging setup.

Uses structlog on top of the standard library, rendering either JSON or
coloured console output.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from trade_journal.config import LogFormat, Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging on stderr.

    Safe to call once per CLI command; a later call replaces the earlier
    configuration. Console output is coloured only when stderr is a terminal,
    so captured output stays free of escape codes.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
        force=True,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == LogFormat.JSON:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structured logger.

    Args:
        name: Logger name. Defaults to the calling module when None.

    Returns:
        Structured logger instance.
    """
    return structlog.get_logger(name)


def log_trade_calculation(
    logger: structlog.stdlib.BoundLogger,
    *,
    symbol: str | None,
    direction: str | None,
    is_valid: bool,
    **kwargs: Any,
) -> None:
    """Log one calculator run."""
    logger.debug(
        "trade_calculation",
        symbol=symbol,
        direction=direction,
        is_valid=is_valid,
        **kwargs,
    )


def log_validation_failure(
    logger: structlog.stdlib.BoundLogger,
    *,
    source: str,
    errors: list[str],
    **kwargs: Any,
) -> None:
    """Log rejected user input."""
    logger.info(
        "validation_failed",
        source=source,
        error_count=len(errors),
        errors=errors,
        **kwargs,
    )


def log_wizard_transition(
    logger: structlog.stdlib.BoundLogger,
    *,
    action: str,
    from_step: str,
    to_step: str,
    **kwargs: Any,
) -> None:
    """Log a wizard step change."""
    logger.debug(
        "wizard_transition",
        action=action,
        from_step=from_step,
        to_step=to_step,
        **kwargs,
    )
