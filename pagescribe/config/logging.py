"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

# Stdlib loggers that are chatty at INFO while Playwright runs
_QUIET_LOGGERS = ("asyncio",)


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog for the CLI and library modules.

    Context bound with ``structlog.contextvars.bind_contextvars`` (the CLI binds
    the running command and target URL) is merged into every event.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Logs go to stderr; stdout is reserved for the command's own report
    if json_output or not sys.stderr.isatty():
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
