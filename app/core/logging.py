"""Logging configuration.

Module code logs through ``logging.getLogger(__name__)``; this module installs
the root handler, whose structlog ``ProcessorFormatter`` renders every record
as JSON or as a console line depending on ``LOG_FORMAT``. Fields passed with
``extra=`` and values bound with ``structlog.contextvars`` end up as keys of
the rendered event.
"""

import logging
import sys

import structlog

from app.core.config import LogFormatEnum, Settings

# Applied to records from stdlib loggers and from structlog loggers alike
SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def build_formatter(log_format: LogFormatEnum) -> structlog.stdlib.ProcessorFormatter:
    """Create the formatter for the given output format."""
    if log_format == LogFormatEnum.json:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )


_handler: logging.Handler | None = None


def setup_logging(config: Settings) -> None:
    """Install a single stdout handler on the root logger.

    Calling it again (app factory in tests) replaces the previous handler
    instead of stacking another one.
    """
    global _handler

    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(config.log_format))

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(config.log_level.value)
    _handler = handler
