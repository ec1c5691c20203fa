"""
Notification Clients
Deliver password reset emails either over SMTP or via the notification-service
"""

import aiosmtplib
import httpx
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Dict, Optional

from app.utils.config import SMTPConfig
from app.utils.exceptions import NotifierError

logger = logging.getLogger(__name__)

RESET_PASSWORD_SUBJECT = "Change Password - ReadIt"
RESET_PASSWORD_TEXT = "You requested to change your password"


class SMTPNotifier:
    """Sends email straight to an SMTP server"""

    def __init__(self, config: SMTPConfig):
        self.config = config

    def _create_mime_message(self, to_email: str, html_content: str) -> MIMEMultipart:
        """Create MIME message with a plain text fallback"""
        from_address = f"{self.config.default_from_name} <{self.config.default_from_email}>"
        domain = self.config.default_from_email.rsplit('@', 1)[-1]

        msg = MIMEMultipart('alternative')
        msg['From'] = from_address
        msg['To'] = to_email
        msg['Subject'] = RESET_PASSWORD_SUBJECT
        msg['Message-ID'] = make_msgid(domain=domain)

        msg.attach(MIMEText(RESET_PASSWORD_TEXT, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_content, 'html', 'utf-8'))
        return msg

    async def send(self, to_email: str, html_content: str) -> Dict[str, Any]:
        """
        Send an email

        Args:
            to_email: Recipient address
            html_content: HTML body

        Returns:
            dict: Delivery result with the message id

        Raises:
            NotifierError: If the SMTP exchange fails
        """
        message = self._create_mime_message(to_email, html_content)
        smtp = aiosmtplib.SMTP(
            hostname=self.config.smtp_host,
            port=self.config.smtp_port,
            use_tls=self.config.smtp_use_tls,
            timeout=self.config.smtp_timeout
        )

        try:
            await smtp.connect()

            # Authenticate if credentials provided
            if self.config.smtp_username and self.config.smtp_password:
                await smtp.login(self.config.smtp_username, self.config.smtp_password)

            await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending email: {e}")
            raise NotifierError(f"Failed to send email: {e}") from e
        finally:
            if smtp.is_connected:
                try:
                    await smtp.quit()
                except aiosmtplib.SMTPException as e:
                    logger.debug(f"Ignoring SMTP quit failure: {e}")

        logger.info(f"Email sent to {to_email}: {message['Message-ID']}")
        return {
            "success": True,
            "message_id": message['Message-ID'],
            "recipients": [to_email]
        }


class NotificationServiceNotifier:
    """HTTP client for the notification service"""

    def __init__(self, config: SMTPConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = config.notification_service_url
        self.from_email = config.default_from_email
        self.from_name = config.default_from_name
        self.timeout = httpx.Timeout(10.0)
        self._transport = transport

    async def send(self, to_email: str, html_content: str) -> Dict[str, Any]:
        """
        Send an email via notification service

        Args:
            to_email: Recipient address
            html_content: HTML body

        Returns:
            Response from notification service

        Raises:
            NotifierError: If the service rejects the request or is unreachable
        """
        payload = {
            "to_emails": [to_email],
            "subject": RESET_PASSWORD_SUBJECT,
            "html_content": html_content,
            "text_content": RESET_PASSWORD_TEXT,
            "from_email": self.from_email,
            "from_name": self.from_name,
            "priority": "normal",
            "tags": ["password_reset", "security"]
        }

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                response = await client.post('/api/v1/emails/send', json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error sending email: {e.response.status_code} - {e.response.text}")
            raise NotifierError(f"Failed to send email: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error sending email: {e}")
            raise NotifierError(f"Failed to connect to notification service: {e}") from e

        # A 2xx means the service accepted the message, whatever the body says
        try:
            result = response.json()
        except ValueError:
            result = None
        if not isinstance(result, dict):
            logger.warning(f"Notification service accepted email with unexpected body: {response.text[:100]}")
            result = {"success": True}

        logger.info(f"Email sent via notification service: {result.get('email_id')}")
        return result


def build_notifier(config: SMTPConfig):
    """Pick the delivery backend named in the configuration"""
    if config.notifier_backend == "http":
        return NotificationServiceNotifier(config)
    return SMTPNotifier(config)
