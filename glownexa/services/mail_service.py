import html
import logging
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

import aiosmtplib

from glownexa.core.config import settings
from glownexa.core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Contact Form Message"


def _header_safe(value: str) -> str:
    """Collapse CR/LF so visitor input cannot add headers"""
    return " ".join(value.split())


class MailService:
    """SMTP transport for the contact form relay"""

    def __init__(self):
        self.hostname = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.use_tls = settings.SMTP_SECURE
        self.username = settings.SMTP_USER
        self.password = settings.SMTP_PASS
        self.timeout = 30

    def _transport_options(self) -> dict:
        return {
            "hostname": self.hostname,
            "port": self.port,
            "username": self.username,
            "password": self.password,
            # implicit TLS when secure, otherwise upgrade with STARTTLS if offered
            "use_tls": self.use_tls,
            "start_tls": False if self.use_tls else None,
            "timeout": self.timeout,
        }

    def build_contact_message(
        self,
        name: str,
        email: str,
        message: str,
        subject: Optional[str] = None,
        to_email: Optional[str] = None,
    ) -> EmailMessage:
        """Build the email forwarded to the support inbox"""
        safe_name = _header_safe(name)
        safe_email = _header_safe(email)

        msg = EmailMessage()
        # Authenticated relays reject foreign From addresses; keep the visitor in Reply-To
        msg["From"] = formataddr((safe_name, self.username or safe_email))
        msg["Reply-To"] = formataddr((safe_name, safe_email))
        msg["To"] = to_email or settings.CONTACT_TO_EMAIL
        msg["Subject"] = _header_safe(subject) if subject and subject.strip() else DEFAULT_SUBJECT

        msg.set_content(f"Name: {name}\nEmail: {email}\n\n{message}")

        html_message = html.escape(message).replace("\r\n", "\n").replace("\n", "<br/>")
        msg.add_alternative(
            f"""<p><strong>Name:</strong> {html.escape(name)}</p>
             <p><strong>Email:</strong> {html.escape(email)}</p>
             <p><strong>Message:</strong></p>
             <p>{html_message}</p>""",
            subtype="html",
        )
        return msg

    async def send_message(self, msg: EmailMessage) -> None:
        """Hand one message to the SMTP server; a single attempt, no retries"""
        try:
            await aiosmtplib.send(msg, **self._transport_options())
            logger.info(f"Email sent successfully to {msg['To']}")
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Mail send error: {e}")
            raise MailDeliveryError(str(e)) from e

    async def send_contact_message(
        self,
        name: str,
        email: str,
        message: str,
        subject: Optional[str] = None,
    ) -> None:
        if not settings.CONTACT_TO_EMAIL:
            logger.error("CONTACT_TO_EMAIL is not configured")
            raise MailDeliveryError("No recipient configured")

        msg = self.build_contact_message(name, email, message, subject)
        await self.send_message(msg)

    async def verify_connection(self) -> bool:
        """Connect and authenticate once so misconfiguration shows up in the startup log"""
        options = self._transport_options()
        smtp = aiosmtplib.SMTP(
            hostname=options["hostname"],
            port=options["port"],
            use_tls=options["use_tls"],
            start_tls=options["start_tls"],
            timeout=10,
        )
        try:
            await smtp.connect()
            if self.username and self.password:
                await smtp.login(self.username, self.password)
            await smtp.quit()
            logger.info("SMTP server is ready to take messages")
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(f"SMTP verify failed: {e}")
            return False


mail_service = MailService()
