"""
Structured logging configuration for permission-translation.

The library itself never configures logging; it only emits through
``structlog.get_logger()``.  Applications that want the library's
rejection diagnostics call ``configure_logging()`` once at startup::

    from permission_translation.core.logging import configure_logging

    configure_logging(level="DEBUG")

Every rejection is then rendered as a key-value event::

    {"event": "permission_rejected", "reason_code": "INVALID_BITS",
     "value": "0x20", "level": "debug", "timestamp": "2026-..."}

In dev the output is coloured console text; with ``json_output=True``
it is JSON lines.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structlog + stdlib logging for the process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_output: If True, emit JSON lines.  If False, emit
                     human-readable console output.

    Calling it again is safe; the root handler is never duplicated.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    root = logging.getLogger()
    existing = [
        h
        for h in root.handlers
        if isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), structlog.stdlib.ProcessorFormatter)
    ]
    if existing:
        # Re-point the existing handler so a second call can switch renderers
        for h in existing:
            h.setFormatter(formatter)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(log_level)
