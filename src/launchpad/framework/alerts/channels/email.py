"""SMTP delivery of launch failure alerts, diagnostics attached."""

from __future__ import annotations

import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

from launchpad.core.errors import DeliveryError
from launchpad.framework.alerts.base import BaseChannel
from launchpad.framework.alerts.protocol import Alert, AlertSeverity, ChannelType, DeliveryResult


def _body(alert: Alert) -> str:
    lines = [
        f"{alert.severity.value}: {alert.title}",
        "",
        f"Source: {alert.source}",
        f"Time: {alert.created_at.isoformat()}",
        "",
        alert.message,
    ]
    if alert.error:
        lines += ["", f"Error: {alert.error.message}"]
    return "\n".join(lines) + "\n"


class EmailChannel(BaseChannel):
    """
    Sends each alert as one multipart message.

    Recipients named on the alert win over the channel's configured
    list; with neither, delivery fails without opening a connection.
    SMTP and socket errors come back as a failed ``DeliveryResult``.
    """

    def __init__(
        self,
        name: str,
        smtp_host: str,
        from_address: str,
        recipients: list[str] | None = None,
        *,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
        min_severity: AlertSeverity = AlertSeverity.INFO,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, ChannelType.EMAIL, min_severity=min_severity, **kwargs)
        self._server = (smtp_host, smtp_port)
        self._credentials = (smtp_user, smtp_password) if smtp_user and smtp_password else None
        self._sender = from_address
        self._default_recipients = list(recipients or [])
        self._use_tls = use_tls
        self._timeout = timeout

    def recipients_for(self, alert: Alert) -> list[str]:
        return list(alert.recipients or self._default_recipients)

    def compose(self, alert: Alert, recipients: list[str]) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = f"[{alert.severity.value}] {alert.title}"
        msg["From"] = self._sender
        msg["To"] = ", ".join(recipients)
        msg["X-Priority"] = alert.priority.x_priority
        msg["Importance"] = alert.priority.value
        msg.attach(MIMEText(_body(alert), "plain", "utf-8"))

        for attachment in alert.attachments:
            part = MIMEApplication(attachment.content, _subtype=attachment.subtype)
            part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
            msg.attach(part)
        return msg

    def _deliver(self, recipients: list[str], raw: str) -> None:
        host, port = self._server
        with smtplib.SMTP(host, port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._credentials:
                smtp.login(*self._credentials)
            smtp.sendmail(self._sender, recipients, raw)

    def send(self, alert: Alert) -> DeliveryResult:
        recipients = self.recipients_for(alert)
        if not recipients:
            return DeliveryResult.fail(self.name, DeliveryError("No email recipients configured"))

        try:
            self._deliver(recipients, self.compose(alert, recipients).as_string())
        except smtplib.SMTPException as exc:
            return DeliveryResult.fail(self.name, DeliveryError(str(exc), cause=exc))
        except OSError as exc:
            return DeliveryResult.fail(self.name, DeliveryError(f"SMTP connection failed: {exc}", cause=exc))
        return DeliveryResult.ok(self.name, f"Sent to {len(recipients)} recipient(s)")
