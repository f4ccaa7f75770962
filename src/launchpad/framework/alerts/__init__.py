"""
Alerting framework package.

Provides a unified interface for notifying operators through channels.
"""

from launchpad.framework.alerts.base import BaseChannel
from launchpad.framework.alerts.channels import ConsoleChannel, EmailChannel
from launchpad.framework.alerts.notifier import Notifier
from launchpad.framework.alerts.protocol import (
    Alert,
    AlertChannel,
    AlertPriority,
    AlertSeverity,
    Attachment,
    ChannelType,
    DeliveryResult,
)

__all__ = [
    # Enums
    "AlertSeverity",
    "AlertPriority",
    "ChannelType",
    # Data classes
    "Alert",
    "Attachment",
    "DeliveryResult",
    # Protocols
    "AlertChannel",
    # Base class
    "BaseChannel",
    # Implementations
    "ConsoleChannel",
    "EmailChannel",
    # Routing
    "Notifier",
]
