"""
Adapter: SMTP email sender.

Implements EmailSender with the standard library SMTP client.
One connection per message; the notification worker is the only caller.
"""

import logging
import smtplib
from email.message import EmailMessage as MimeMessage
from typing import Optional

from tradevault.domain.notifications.entities import EmailMessage, EmailSender

logger = logging.getLogger(__name__)


class SmtpEmailSender(EmailSender):
    """Sends multipart (text + HTML) mail through an SMTP relay.

    Args:
        host: SMTP server host.
        port: SMTP server port (465 for implicit TLS, 587 for STARTTLS).
        sender: From header value.
        user: Login user, or None for an unauthenticated relay.
        password: Login password.
        use_ssl: Use implicit TLS; otherwise upgrade with STARTTLS when a user is set.
        timeout: Socket timeout in seconds.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._use_ssl = use_ssl
        self._timeout = timeout

    def _build(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = self._sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.text or message.subject)
        mime.add_alternative(message.html, subtype="html")
        return mime

    def send(self, message: EmailMessage) -> None:
        mime = self._build(message)
        if self._use_ssl:
            client = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        else:
            client = smtplib.SMTP(self._host, self._port, timeout=self._timeout)

        with client as smtp:
            if not self._use_ssl and self._user:
                smtp.starttls()
            if self._user:
                smtp.login(self._user, self._password or "")
            smtp.send_message(mime)
        logger.debug("Email '%s' handed to %s", message.subject, self._host)
