"""structlog configuration for fieldrules.

fieldrules is a library, so logging is opt-in: nothing is configured until
the embedding application calls :func:`configure_logging`, usually through
:meth:`~fieldrules.config.settings.RulesSettings.apply_logging`. Output goes
through a single handler on the ``fieldrules`` logger; the root logger and
handlers owned by the application are left alone.

Renderers:
- console (default): key=value lines, colored only on a TTY
- JSON (``log_json``): one JSON object per line

Audit events use the ``fieldrules.audit`` child logger and share the handler.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

LOGGER_NAME = "fieldrules"
HANDLER_NAME = "fieldrules"


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Route ``fieldrules`` log records (stdlib and structlog) to *stream*.

    Calling again replaces the handler installed by the previous call.

    Args:
        verbose: DEBUG level for the ``fieldrules`` logger; WARNING otherwise.
        log_json: Render JSON lines instead of console output.
        stream: Destination, stderr by default.

    Returns:
        The installed handler.
    """
    out = stream if stream is not None else sys.stderr
    shared = _processors()

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    pkg_logger = logging.getLogger(LOGGER_NAME)
    for previous in [h for h in pkg_logger.handlers if h.get_name() == HANDLER_NAME]:
        pkg_logger.removeHandler(previous)
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Records are fully handled here; the application's root handlers would duplicate them.
    pkg_logger.propagate = False
    return handler
