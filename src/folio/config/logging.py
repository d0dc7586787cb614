"""structlog configuration for folio.

folio's own modules log through plain ``logging.getLogger(__name__)``;
this module installs a structlog ``ProcessorFormatter`` on the root
handler so those records come out either as console lines or (with
``--log-json``) as one JSON object per line. Logs always go to stderr,
leaving stdout to command results.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog

# Third-party loggers kept at WARNING even with -v.
_QUIET_LOGGERS = ("markdown_it",)


def _use_colors(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route ``folio.*`` records through structlog.

    Args:
        verbose: Show folio's DEBUG records (index and render counts).
            Otherwise only warnings such as skipped documents appear.
        log_json: Render JSON lines; tracebacks become an ``exception``
            string field instead of a multi-line dump.
        stream: Destination, default ``sys.stderr`` at call time.
    """
    stream = stream or sys.stderr

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        final: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final = [structlog.dev.ConsoleRenderer(colors=_use_colors(stream))]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("folio").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
