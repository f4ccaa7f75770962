"""Alert channel implementations.

Manifesto:
    Each channel module implements a single delivery target.
    New channels are added as modules here and handed to the
    :class:`~launchpad.framework.alerts.notifier.Notifier`.

Tags:
    launchpad, framework, alerts, channels, delivery

Doc-Types:
    api-reference
"""

from launchpad.framework.alerts.channels.console import ConsoleChannel
from launchpad.framework.alerts.channels.email import EmailChannel

__all__ = [
    "ConsoleChannel",
    "EmailChannel",
]
