"""Structured logging shared by every module of the tracker.

Loggers are structlog loggers backed by the standard library, so records
still reach stdlib handlers (including pytest's ``caplog``). Positional
``%s`` arguments are formatted before rendering.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory

_configured = False


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    if not structlog.is_configured():
        _configure_structlog()
    return structlog.get_logger(name)


def configure_logging(level: Optional[str] = None) -> None:
    """Send the package's log lines to stderr at ``level``.

    Calling this more than once only updates the level.
    """
    global _configured

    if not structlog.is_configured():
        _configure_structlog()

    package_logger = logging.getLogger("matchday")
    package_logger.setLevel(getattr(logging, (level or "INFO").upper()))
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    _configured = True
