"""Route rommap's stdlib logging through structlog.

Library modules log with ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once so those records reach stderr either as
console lines or, with ``--log-json``, as one JSON object per line.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers kept at WARNING even under --verbose.
QUIET_LOGGERS = ("sqlalchemy",)


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    *verbose* drops the ``rommap`` logger to DEBUG; otherwise only
    warnings and errors are shown.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger("rommap").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
