"""
Account emails: rendering and SMTP delivery.
"""
import logging
import smtplib
import ssl
from contextlib import contextmanager
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import DictLoader, Environment, select_autoescape

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

# Transactional mails are short; their bodies are kept inline
TEMPLATES = {
    "verification_email.txt": (
        "Hello {{ user_name }},\n\n"
        "Welcome to {{ company_name or 'your back office' }}. Confirm your email address "
        "within {{ expires_hours }} hours by opening the link below:\n\n"
        "{{ verification_url }}\n\n"
        "If you did not create this account you can ignore this message.\n"
    ),
    "verification_email.html": (
        "<p>Hello {{ user_name }},</p>"
        "<p>Welcome to {{ company_name or 'your back office' }}. Confirm your email address "
        "within {{ expires_hours }} hours:</p>"
        "<p><a href=\"{{ verification_url }}\">Verify email</a></p>"
        "<p>If you did not create this account you can ignore this message.</p>"
    ),
    "password_reset_email.txt": (
        "Hello {{ user_name }},\n\n"
        "We received a request to reset your password. The link below is valid for "
        "{{ expires_minutes }} minutes:\n\n"
        "{{ reset_url }}\n\n"
        "If you did not ask for a reset, no action is needed.\n"
    ),
    "password_reset_email.html": (
        "<p>Hello {{ user_name }},</p>"
        "<p>We received a request to reset your password. The link is valid for "
        "{{ expires_minutes }} minutes:</p>"
        "<p><a href=\"{{ reset_url }}\">Reset password</a></p>"
        "<p>If you did not ask for a reset, no action is needed.</p>"
    ),
}


class EmailService:
    """
    SMTP delivery for account mails.

    Without EMAIL_USERNAME configured nothing is sent; the message is logged
    instead so development setups work without a mail server.
    """

    def __init__(self):
        self.host = settings.EMAIL_SMTP_SERVER
        self.port = settings.EMAIL_SMTP_PORT
        self.username = settings.EMAIL_USERNAME
        self.password = settings.EMAIL_PASSWORD
        self.starttls = settings.EMAIL_USE_TLS
        self.sender = settings.EMAIL_FROM or settings.EMAIL_USERNAME
        self.sender_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL.rstrip("/")
        self.templates = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))

    @property
    def enabled(self) -> bool:
        return bool(self.username)

    def link(self, path: str, token: str) -> str:
        return f"{self.frontend_url}/{path}?token={token}"

    @contextmanager
    def _connect(self):
        # Port 587 upgrades with STARTTLS, anything else expects implicit TLS
        if self.starttls:
            server = smtplib.SMTP(self.host, self.port, timeout=30)
            server.starttls(context=ssl.create_default_context())
        else:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=30, context=ssl.create_default_context())
        try:
            server.login(self.username, self.password)
            yield server
        finally:
            server.quit()

    def render(self, name: str, context: Dict[str, Any]) -> Tuple[str, str]:
        """Plain text and HTML bodies for template `name`."""
        text = self.templates.get_template(f"{name}.txt").render(**context)
        html = self.templates.get_template(f"{name}.html").render(**context)
        return text, html

    def _build_message(self, recipients: List[str], subject: str, text: str, html: Optional[str]) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.sender_name, self.sender))
        message["To"] = ", ".join(recipients)
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def send(self, recipients: List[str], subject: str, text: str, html: Optional[str] = None) -> bool:
        """
        Deliver one message. Returns False on SMTP failure so the calling
        task can retry.
        """
        if not self.enabled:
            logger.info(f"Email disabled, would send '{subject}' to {', '.join(recipients)}")
            logger.debug(text)
            return True

        message = self._build_message(recipients, subject, text, html)
        try:
            with self._connect() as server:
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Could not deliver '{subject}' to {', '.join(recipients)}: {e}")
            return False

        logger.info(f"Delivered '{subject}' to {', '.join(recipients)}")
        return True

    def send_template(self, recipients: List[str], subject: str, name: str, context: Dict[str, Any]) -> bool:
        text, html = self.render(name, context)
        return self.send(recipients, subject, text, html)


email_service = EmailService()
