# pricewatch/notifications/email_notifier.py
import asyncio
import smtplib
import ssl
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from pricewatch.errors import NotifyError
from pricewatch.logger import logger
from .base import Notifier


class EmailNotifier(Notifier):
    """Send alert emails through an SMTP relay (Resend by default)."""

    name = "email"

    def __init__(
        self,
        smtp_server: str,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_address: str = "noreply@uth.asia",
        from_name: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 15.0,
    ):
        """
        Args:
            smtp_server: SMTP server hostname
            smtp_port: 465 for implicit TLS, otherwise plain/STARTTLS
            smtp_username: SMTP authentication username
            smtp_password: SMTP authentication password (the Resend API key)
            from_address: Sender email address
            from_name: Sender display name
            use_tls: Whether to issue STARTTLS on non-465 ports
            timeout: Socket timeout for the whole exchange
        """
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_address = from_address
        self.from_name = from_name
        self.use_tls = use_tls
        self.timeout = timeout

    def _build(self, recipient: str, subject: str, body: str, html_body: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = Header(subject, "utf-8")
        msg["From"] = formataddr((self.from_name, self.from_address)) if self.from_name else self.from_address
        msg["To"] = recipient
        msg.attach(MIMEText(body, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _deliver(self, recipient: str, msg: MIMEMultipart) -> None:
        try:
            if self.smtp_port == 465:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, context=context, timeout=self.timeout) as server:
                    self._login(server)
                    server.sendmail(self.from_address, [recipient], msg.as_string())
            else:
                with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout) as server:
                    if self.use_tls:
                        server.starttls(context=ssl.create_default_context())
                    self._login(server)
                    server.sendmail(self.from_address, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyError(f"SMTP delivery to {recipient} failed: {e}") from e

    def _login(self, server: smtplib.SMTP) -> None:
        if self.smtp_username and self.smtp_password:
            server.login(self.smtp_username, self.smtp_password)

    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        if not recipient:
            logger.warning("[Email] No recipient address; not sending")
            return False

        msg = self._build(recipient, subject, body, html_body)
        try:
            # smtplib blocks; keep the event loop free
            await asyncio.wait_for(
                asyncio.to_thread(self._deliver, recipient, msg),
                timeout=self.timeout + 5,
            )
        except asyncio.TimeoutError:
            logger.error(f"[Email] Send to {recipient} timed out")
            return False
        except NotifyError as e:
            logger.error(f"[Email] {e}")
            return False

        logger.info(f"[Email] Sent '{subject}' to {recipient}")
        return True
