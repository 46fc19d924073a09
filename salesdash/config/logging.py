"""
Logging Configuration for the Sales Dashboard

structlog renders through the stdlib root logger, so library loggers and
salesdash loggers share one format. Output goes to stderr by default;
stdout belongs to the CLI's JSON payloads.
"""

import logging
import sys
from typing import IO, List, Optional

import structlog

from salesdash.config.settings import get_settings


def _pre_chain() -> List:
    """Processors applied to every record before rendering"""
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str, stream: IO[str]):
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(log_level: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override the configured level (DEBUG, INFO, WARNING, ERROR)
        stream: Destination of log lines; stderr when not given
    """
    settings = get_settings()
    level_name = (log_level or settings.effective_log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    stream = stream or sys.stderr

    pre_chain = _pre_chain()
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(settings.monitoring.log_format, stream),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    get_logger(__name__).debug(
        "Logging configured",
        level=level_name,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
    )


def get_logger(name: str):
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
