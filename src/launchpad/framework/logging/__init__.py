"""
Launchpad Logging - Structured, run-aware logging.

This module provides:
- Structured logging with structlog
- Run context propagation via contextvars
- Timing utilities for run phases
- Environment-based configuration

Usage:
    from launchpad.framework.logging import get_logger, configure_logging, log_step, set_context

    # Configure once at startup
    configure_logging()

    # Get a logger
    log = get_logger(__name__)

    # Set run context (automatically attached to all logs)
    set_context(run_id="20260101T000000-ab12", script_name="Get printers")

    # Log with timing
    with log_step("launch.bind"):
        bind_arguments()
"""

from launchpad.framework.logging.config import configure_logging, is_configured, is_debug_enabled
from launchpad.framework.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from launchpad.framework.logging.timing import TimingResult, log_step

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "LogContext",
    # Timing
    "log_step",
    "TimingResult",
]
