"""structlog setup for notewright's event log on stderr.

stdout carries command results only, so every log line goes to stderr,
either through the console renderer or as one JSON object per line
(``--log-json``). Events are dotted names grouped by the part of the
system that emits them:

- ``templates.*``: index scans (``templates.loaded``,
  ``templates.load.superseded``, ``templates.load.error``), per-file
  ``templates.read_failed`` / ``templates.list_failed`` and
  ``templates.folder_moved`` while watching.
- ``watch.*`` and ``vault.*``: the watchdog observer starting and
  stopping, and symlinked folders left out of a listing.
- ``insert.*`` and ``templater.*``: a failed frontmatter write
  (``insert.failed``), the body-only fallback failing
  (``insert.fallback_failed``), a clipboard that could not take the
  frontmatter (``insert.clipboard_failed``) and Templater expansion
  errors.

Without ``--verbose`` only warnings and errors are shown.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Libraries whose DEBUG output would drown notewright's own events.
_QUIET_LOGGERS = ("watchdog", "asyncio")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(log_json: bool, pre_chain: list[structlog.types.Processor]) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Safe to call more than once; the previous handler is replaced.

    Args:
        verbose: Show notewright's DEBUG and INFO events.
        log_json: Render JSON lines instead of console output.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(_stderr_handler(log_json, shared))
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("notewright").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
