"""Outgoing notification mail for stock alerts.

The provider is chosen by ``EMAIL_PROVIDER``: ``console`` writes to the log,
``smtp`` and ``sendgrid`` deliver for real. Every provider failure surfaces as
:class:`EmailDeliveryError`.
"""

import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


@dataclass(frozen=True)
class AlertEmail:
    subject: str
    heading: str
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        numbered = "\n".join(f"{index}. {line}" for index, line in enumerate(self.lines, start=1))
        return f"{self.heading}\n\n{numbered}\n"

    @property
    def html(self) -> str:
        items = "".join(f"<li>{html.escape(line)}</li>" for line in self.lines)
        return f"<p>{html.escape(self.heading)}</p><ol>{items}</ol>"


def _deliver_console(to_email: str, message: AlertEmail) -> None:
    logger.info("Alert email to %s: %s\n%s", to_email, message.subject, message.text)


def _deliver_smtp(to_email: str, message: AlertEmail) -> None:
    if not settings.smtp_host:
        raise EmailDeliveryError("SMTP host is not configured")

    mail = EmailMessage()
    mail["Subject"] = message.subject
    mail["From"] = settings.email_from
    mail["To"] = to_email
    mail.set_content(message.text)
    mail.add_alternative(message.html, subtype="html")

    smtp_class = smtplib.SMTP_SSL if settings.smtp_use_ssl else smtplib.SMTP
    try:
        with smtp_class(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as client:
            if settings.smtp_starttls and not settings.smtp_use_ssl:
                client.starttls()
            if settings.smtp_username:
                client.login(settings.smtp_username, settings.smtp_password)
            client.send_message(mail)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"SMTP delivery to {to_email} failed: {exc}") from exc


def _deliver_sendgrid(to_email: str, message: AlertEmail) -> None:
    if not settings.sendgrid_api_key:
        raise EmailDeliveryError("SENDGRID_API_KEY is not configured")

    mail = Mail(
        from_email=settings.email_from,
        to_emails=to_email,
        subject=message.subject,
        plain_text_content=message.text,
        html_content=message.html,
    )
    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(mail)
    except Exception as exc:
        raise EmailDeliveryError(f"SendGrid delivery to {to_email} failed: {exc}") from exc
    if response.status_code >= 400:
        raise EmailDeliveryError(f"SendGrid rejected mail to {to_email} with status {response.status_code}")


_PROVIDERS = {
    "console": _deliver_console,
    "smtp": _deliver_smtp,
    "sendgrid": _deliver_sendgrid,
}


def send_email(to_email: str, message: AlertEmail) -> None:
    deliver = _PROVIDERS.get(settings.email_provider)
    if deliver is None:
        raise EmailDeliveryError(f"Unsupported EMAIL_PROVIDER: {settings.email_provider}")
    deliver(to_email, message)


def build_expiry_removal_message(medicine_names: list[str]) -> AlertEmail:
    return AlertEmail(
        subject="Expired Medicines Removed",
        heading="The following medicines were expired and removed from stock:",
        lines=tuple(medicine_names),
    )


def build_low_stock_message(threshold: int, items: list[tuple[str, int]]) -> AlertEmail:
    return AlertEmail(
        subject="Low-Stock Alert",
        heading=f"The following medicines are below your low-stock threshold ({threshold}):",
        lines=tuple(f"{name}: {quantity}" for name, quantity in items),
    )
