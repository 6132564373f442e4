"""
Transactional email delivery.

Provides:
- Email: the {from, to, subject, htmlBody} message contract
- NotificationSender: SMTP delivery on a small background pool
- Templates for the confirmation, reset, welcome, and order emails

Delivery is fire-and-forget: send() returns once the message is queued and
failures are logged, never raised to the request that triggered them.
"""

import logging
import smtplib
import ssl
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from html import escape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Email:
    """One outgoing HTML email."""
    sender: str
    to: str
    subject: str
    html_body: str


class NotificationSender:
    """Sends HTML email over SMTP without blocking the caller.

    Usage:
        sender = NotificationSender.from_settings(settings.mail)
        sender.send(sender.compose("a@x.com", "Subject", "<p>Hi</p>"))
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        sender_address: str = "no-reply@localhost",
        sender_name: str = "",
        use_ssl: bool = True,
        enabled: bool = True,
        max_workers: int = 2,
        timeout_seconds: int = 10,
    ):
        self.host = host
        self.port = port
        self._username = username
        self._password = password
        self.sender_address = sender_address
        self.sender_name = sender_name
        self.use_ssl = use_ssl
        self.enabled = enabled
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")

    @classmethod
    def from_settings(cls, mail_settings) -> "NotificationSender":
        return cls(
            host=mail_settings.host,
            port=mail_settings.port,
            username=mail_settings.username,
            password=mail_settings.password.get_secret_value(),
            sender_address=mail_settings.sender_address,
            sender_name=mail_settings.sender_name,
            use_ssl=mail_settings.use_ssl,
            enabled=mail_settings.enabled,
            max_workers=mail_settings.max_workers,
            timeout_seconds=mail_settings.timeout_seconds,
        )

    @property
    def from_header(self) -> str:
        if self.sender_name:
            return formataddr((self.sender_name, self.sender_address))
        return self.sender_address

    def compose(self, to: str, subject: str, html_body: str) -> Email:
        return Email(sender=self.from_header, to=to, subject=subject, html_body=html_body)

    def send(self, email: Email) -> Future | None:
        """Queue an email for delivery. Returns the delivery future, if queued."""
        if not self.enabled:
            logger.info(f"Mail disabled, dropping '{email.subject}' to {email.to}")
            return None
        future = self._executor.submit(self._deliver, email)
        future.add_done_callback(lambda f: self._log_outcome(email, f))
        return future

    def _log_outcome(self, email: Email, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error(f"Email '{email.subject}' to {email.to} failed: {error}")
        else:
            logger.info(f"Email '{email.subject}' sent to {email.to}")

    def _deliver(self, email: Email) -> None:
        message = EmailMessage()
        message["From"] = email.sender
        message["To"] = email.to
        message["Subject"] = email.subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(email.html_body, subtype="html")

        if self.use_ssl:
            smtp = smtplib.SMTP_SSL(
                self.host, self.port,
                timeout=self.timeout_seconds,
                context=ssl.create_default_context(),
            )
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds)

        with smtp:
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(message)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


# =============================================================================
# Templates
# =============================================================================

def confirmation_email(name: str, link: str, brand: str, changed: bool = False) -> tuple[str, str]:
    """Subject and body asking the recipient to confirm their email."""
    if changed:
        intro = f"Hi, {escape(name)}! You have decided to change your email"
    else:
        intro = f"Hi, {escape(name)}! Welcome to {escape(brand)}"
    body = (
        f"<h3>{intro}</h3>"
        f'<p>Click <a href="{escape(link, quote=True)}" target="_blank">here</a> '
        f"to confirm your email!</p>"
    )
    return f"CONFIRM EMAIL - {brand}", body


def password_reset_email(name: str, link: str, brand: str) -> tuple[str, str]:
    """Subject and body carrying a password reset link."""
    body = (
        f"<h3>Hi, {escape(name)}!</h3>"
        f'<p>Click <a href="{escape(link, quote=True)}">here</a> to reset your password!</p>'
    )
    return f"RESET PASSWORD - {brand}", body


def order_placed_email(name: str, equipment_name: str, is_rent: bool, brand: str) -> tuple[str, str]:
    kind = "rental" if is_rent else "purchase"
    body = (
        f"<h3>Hi, {escape(name)}! We have placed your order</h3>"
        f"<p>Your {kind} of {escape(equipment_name)} has been recorded.</p>"
    )
    return f"ORDER DETAILS - {brand}", body
