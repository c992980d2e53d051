"""Outbound mail for activation and password reset links."""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

from accounts.config import Settings, get_settings

logger = logging.getLogger("accounts")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@dataclass(frozen=True)
class Recipient:
    """Snapshot of the account fields a message needs.

    Mail may be sent after the request's database session is closed, so
    ORM instances are never handed to the mailer.
    """

    login: str
    email: str
    first_name: str | None = None
    lang_key: str | None = None

    @classmethod
    def from_account(cls, account) -> "Recipient":
        return cls(
            login=account.login,
            email=account.email,
            first_name=account.first_name,
            lang_key=account.lang_key,
        )


class MailService:
    """Renders and delivers account emails over SMTP.

    Delivery failures are logged and reported through the return value;
    they never propagate to the caller.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.templates = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    def _link(self, path: str, key: str) -> str:
        return f"{self.settings.BASE_URL.rstrip('/')}{path}?{urlencode({'key': key})}"

    def send_activation_email(self, recipient: Recipient, key: str) -> bool:
        """Send the account activation link."""
        link = self._link("/api/activate", key)
        return self._send(recipient, "Account activation", "mail/activation.html", link)

    def send_password_reset_email(self, recipient: Recipient, key: str) -> bool:
        """Send the password reset link."""
        link = self._link("/account/reset/finish", key)
        return self._send(recipient, "Password reset", "mail/password_reset.html", link)

    def _send(self, recipient: Recipient, subject: str, template: str, link: str) -> bool:
        body = self.templates.get_template(template).render(
            recipient=recipient, link=link, validity_hours=self.settings.RESET_KEY_VALIDITY_HOURS
        )

        if not self.settings.smtp_enabled:
            logger.info("MAIL (%s) to %s: %s", subject, recipient.email, link)
            return True

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.settings.MAIL_FROM
        message["To"] = recipient.email
        message.set_content(f"{subject}: {link}")
        message.add_alternative(body, subtype="html")

        attempts = max(1, self.settings.MAIL_SEND_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            try:
                self._deliver(message)
                logger.info("Sent '%s' email to %s", subject, recipient.email)
                return True
            except (smtplib.SMTPException, OSError):
                logger.exception(
                    "Email '%s' to %s failed (attempt %d/%d)", subject, recipient.email, attempt, attempts
                )
        return False

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=30) as smtp:
            smtp.starttls()
            if self.settings.SMTP_USERNAME:
                smtp.login(self.settings.SMTP_USERNAME, self.settings.SMTP_PASSWORD)
            smtp.send_message(message)


_mail_service: MailService | None = None


def get_mail_service() -> MailService:
    """Get singleton mail service instance."""
    global _mail_service
    if _mail_service is None:
        _mail_service = MailService()
    return _mail_service
