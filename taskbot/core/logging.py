"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; this renders the stdlib
records as JSON or console lines and merges the per-interaction context bound
with ``structlog.contextvars`` (trace id, action id, user id).
"""
import logging
import sys

import structlog

from taskbot.config import settings

_configured = False


def configure_logging(level: str = None, fmt: str = None) -> None:
    """Install the root handler once."""
    global _configured
    if _configured:
        return

    level = (level or settings.LOG_LEVEL).upper()
    fmt = (fmt or settings.LOG_FORMAT).lower()

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    _configured = True
