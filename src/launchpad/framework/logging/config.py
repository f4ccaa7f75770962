"""
Logging setup for the launcher process.

structlog renders through the stdlib ``logging`` tree, so entries from
structlog loggers and plain ``logging`` calls share one set of handlers:

    stderr          console renderer, or JSON with LAUNCHPAD_LOG_FORMAT=json
    <log-dir>/...   JSON lines, when the run was given ``--log-dir``

LAUNCHPAD_LOG_LEVEL picks the level when the caller passes none.

Usage:
    configure_logging()
    configure_logging(level="DEBUG", format="json", log_file=Path("run.log"))
"""

import logging
import os
import sys
from pathlib import Path
from typing import Literal

import structlog
from structlog.types import Processor

from launchpad.framework.logging.context import add_context_processor

_configured = False

_SHARED_PROCESSORS: list[Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    add_context_processor,
    structlog.processors.StackInfoRenderer(),
]


def _formatter(*renderers: Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )


def _stderr_handler(log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(_formatter(structlog.processors.format_exc_info, structlog.processors.JSONRenderer()))
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
        handler.setFormatter(_formatter(renderer))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(_formatter(structlog.processors.format_exc_info, structlog.processors.JSONRenderer()))
    return handler


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    log_file: Path | None = None,
    force: bool = False,
) -> None:
    """
    Install the launcher's handlers on the root logger.

    Only the first call takes effect unless ``force`` is set; a forced
    call closes and replaces the handlers a previous call installed.
    """
    global _configured
    if _configured and not force:
        return

    log_level = getattr(logging, (level or os.environ.get("LAUNCHPAD_LOG_LEVEL", "INFO")).upper())
    log_format = (format or os.environ.get("LAUNCHPAD_LOG_FORMAT", "console")).lower()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    root.addHandler(_stderr_handler(log_format))
    if log_file is not None:
        root.addHandler(_file_handler(log_file))
    root.setLevel(log_level)
    logging.getLogger("launchpad").setLevel(log_level)

    _configured = True


def is_debug_enabled() -> bool:
    return logging.getLogger().isEnabledFor(logging.DEBUG)


def is_configured() -> bool:
    return _configured
