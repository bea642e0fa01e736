"""
Structured logging configuration using structlog.

Engine modules log through ``logging.getLogger(__name__)`` (free text) or
``structlog.stdlib.get_logger`` (events with fields). Both end up in the same
handler: JSON lines by default, colored console output when
``LOG_FORMAT=console``.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from .config import settings

_QUIET_LOGGERS = ("httpcore", "httpx")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route stdlib and structlog records through one formatter on stdout.

    Args:
        log_level: Override level (default: settings.log_level)
        log_format: "json" or "console" (default: settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    fmt = (log_format or settings.log_format).lower()

    processors = _shared_processors()
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # One request per poll step
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def account_context(address: str, **fields) -> Iterator[None]:
    """Attach the acting wallet (and any extra fields) to every log record in the block."""
    with structlog.contextvars.bound_contextvars(wallet=address, **fields):
        yield
