# utils/email_client.py
import logging
import smtplib
from contextlib import contextmanager
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

import config

logger = logging.getLogger(__name__)


class EmailClient:
    """SMTP sender behind the /api/email/send endpoint. One attempt per message."""

    def __init__(self, smtp_host: str, smtp_port: int, username: Optional[str],
                 password: Optional[str], use_ssl: bool = False):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl

    @contextmanager
    def _connection(self):
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=config.HTTP_TIMEOUT)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=config.HTTP_TIMEOUT)
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning("Error closing SMTP connection: %s", e)

    @staticmethod
    def build_message(sender: str, recipients: List[str], subject: str,
                      text_body: str, html_body: Optional[str] = None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(text_body or "", "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))
        return msg

    def send_email(self, sender: str, recipients: List[str], subject: str,
                   text_body: str, html_body: Optional[str] = None) -> bool:
        msg = self.build_message(sender, recipients, subject, text_body, html_body)
        try:
            with self._connection() as server:
                server.sendmail(sender, recipients, msg.as_string())
            logger.info("Email '%s' sent to %s", subject, ", ".join(recipients))
            return True
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed, check username/password")
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Sending email '%s' failed: %s", subject, e)
        return False


def get_email_client() -> Optional[EmailClient]:
    if not config.SMTP_HOST:
        return None
    return EmailClient(
        config.SMTP_HOST,
        config.SMTP_PORT,
        config.SMTP_USERNAME,
        config.SMTP_PASSWORD,
        config.SMTP_USE_SSL,
    )
