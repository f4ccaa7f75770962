"""
Launchpad Framework - infrastructure shared by every run.

This module provides:
- Structured logging with run context (``framework.logging``)
- Operator alerting over email and console channels (``framework.alerts``)

Import from the subpackages directly:
    from launchpad.framework.logging import get_logger
    from launchpad.framework.alerts import Notifier
"""
