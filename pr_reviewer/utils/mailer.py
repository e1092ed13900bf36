# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional

from pr_reviewer.constants import DEFAULT_SMTP_FROM_EMAIL, DEFAULT_SMTP_HOST, DEFAULT_SMTP_PORT
from pr_reviewer.exceptions import NotifyError

logger = logging.getLogger(__name__)


@dataclass
class SmtpConfig:
    """SMTP server settings for outgoing mail."""

    host: str = DEFAULT_SMTP_HOST
    port: int = DEFAULT_SMTP_PORT
    from_email: str = DEFAULT_SMTP_FROM_EMAIL
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = False
    timeout: int = 30


class SmtpMailer:
    """Sends plain-text mail through an SMTP server."""

    def __init__(self, smtp_config: SmtpConfig):
        self.smtp_config = smtp_config

    def send(self, to_email: str, subject: str, body: str) -> None:
        """
        Send a plain-text email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            body: Plain-text body

        Raises:
            NotifyError: if the message could not be delivered
        """
        msg = MIMEText(body, 'plain')
        msg['Subject'] = subject
        msg['From'] = self.smtp_config.from_email
        msg['To'] = to_email

        try:
            with smtplib.SMTP(self.smtp_config.host, self.smtp_config.port, timeout=self.smtp_config.timeout) as server:
                if self.smtp_config.use_tls:
                    server.starttls()
                if self.smtp_config.username and self.smtp_config.password:
                    server.login(self.smtp_config.username, self.smtp_config.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyError(f"Failed to send email to {to_email}: {e}") from e

        logger.debug(f"Mail sent successfully to {to_email}")
