"""
Types exchanged between the notifier and its channels.

An :class:`Alert` describes one operator notification: a severity, a
subject line, the body text and any files to attach (the failure
diagnostic, for instance). Channels satisfy :class:`AlertChannel` and
answer each delivery with a :class:`DeliveryResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from launchpad.core.errors import LaunchpadError

_SEVERITY_ORDER = ("INFO", "WARNING", "ERROR", "CRITICAL")


class AlertSeverity(str, Enum):
    """Ordered by urgency; a channel passes alerts at or above its floor."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self.value)

    def __lt__(self, other: AlertSeverity) -> bool:
        return self.rank < other.rank

    def __le__(self, other: AlertSeverity) -> bool:
        return self.rank <= other.rank

    def __ge__(self, other: AlertSeverity) -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: AlertSeverity) -> bool:
        return self.rank > other.rank


class AlertPriority(str, Enum):
    """Delivery priority, carried to mail as ``X-Priority``/``Importance``."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def x_priority(self) -> str:
        return {
            AlertPriority.HIGH: "1 (Highest)",
            AlertPriority.NORMAL: "3 (Normal)",
            AlertPriority.LOW: "5 (Lowest)",
        }[self]

    @classmethod
    def for_severity(cls, severity: AlertSeverity) -> AlertPriority:
        if severity >= AlertSeverity.ERROR:
            return cls.HIGH
        if severity == AlertSeverity.WARNING:
            return cls.NORMAL
        return cls.LOW


class ChannelType(str, Enum):
    """Delivery mechanism of a channel."""

    EMAIL = "email"
    CONSOLE = "console"


@dataclass(frozen=True)
class Attachment:
    """A file carried with an alert."""

    filename: str
    content: bytes
    mimetype: str = "application/json"

    @property
    def maintype(self) -> str:
        return self.mimetype.split("/", 1)[0]

    @property
    def subtype(self) -> str:
        return self.mimetype.split("/", 1)[-1]


@dataclass
class Alert:
    """One operator notification. Priority follows severity unless given."""

    severity: AlertSeverity
    title: str
    message: str
    source: str  # script identity, or "launchpad" before one is known

    priority: AlertPriority | None = None
    recipients: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    run_id: str | None = None
    error: LaunchpadError | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self):
        if self.priority is None:
            self.priority = AlertPriority.for_severity(self.severity)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, used for the console channel and logs."""
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "priority": self.priority.value,
            "title": self.title,
            "message": self.message,
            "source": self.source,
            "created_at": self.created_at.isoformat(),
        }
        if self.recipients:
            result["recipients"] = list(self.recipients)
        if self.attachments:
            result["attachments"] = [a.filename for a in self.attachments]
        if self.run_id:
            result["run_id"] = self.run_id
        if self.error:
            result["error"] = self.error.to_dict()
        if self.metadata:
            result["metadata"] = self.metadata
        return result


@dataclass
class DeliveryResult:
    """Outcome of handing one alert to one channel."""

    channel_name: str
    success: bool
    message: str | None = None
    error: Exception | None = None
    delivered_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def ok(cls, channel_name: str, message: str | None = None) -> DeliveryResult:
        return cls(channel_name=channel_name, success=True, message=message)

    @classmethod
    def fail(cls, channel_name: str, error: Exception) -> DeliveryResult:
        return cls(
            channel_name=channel_name,
            success=False,
            error=error,
            message=str(error),
        )


@runtime_checkable
class AlertChannel(Protocol):
    """What the notifier needs from a channel. ``BaseChannel`` provides all but ``send``."""

    @property
    def name(self) -> str: ...

    @property
    def channel_type(self) -> ChannelType: ...

    @property
    def min_severity(self) -> AlertSeverity: ...

    @property
    def enabled(self) -> bool: ...

    def should_send(self, alert: Alert) -> bool: ...

    def send(self, alert: Alert) -> DeliveryResult: ...


__all__ = [
    "Alert",
    "AlertChannel",
    "AlertPriority",
    "AlertSeverity",
    "Attachment",
    "ChannelType",
    "DeliveryResult",
]
