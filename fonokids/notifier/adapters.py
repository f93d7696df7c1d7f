from __future__ import annotations
import logging
import smtplib
import ssl
import threading
from email.message import EmailMessage
from typing import List, Optional

from .contracts import Message, NotifierPort
from .errors import DeliveryFailed, NotifierNotConfigured

logger = logging.getLogger("fonokids.notifier")

class SmtpNotifier(NotifierPort):
    """
    SMTP transport. Port 465 uses implicit TLS, anything else STARTTLS.
    """
    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_address: Optional[str] = None,
        from_name: str = "FonoKids",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address or username
        self.from_name = from_name
        self.timeout = timeout

    def _build(self, message: Message) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self.from_name} <{self.from_address}>"
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.set_content(message.text_body or "")
        msg.add_alternative(message.html_body, subtype="html")
        return msg

    def send(self, message: Message) -> None:
        if not all([self.host, self.port, self.from_address]):
            raise NotifierNotConfigured("SMTP configuration missing")
        msg = self._build(message)
        context = ssl.create_default_context()
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                    self._deliver(server, msg, message.to)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    self._deliver(server, msg, message.to)
        except (smtplib.SMTPException, OSError) as ex:
            logger.warning("notifier.smtp fail to=%s error=%s", message.to, ex)
            raise DeliveryFailed(str(ex)) from ex
        logger.info("notifier.smtp ok to=%s", message.to)

    def _deliver(self, server: smtplib.SMTP, msg: EmailMessage, to: str) -> None:
        if self.username and self.password:
            server.login(self.username, self.password)
        server.send_message(msg, from_addr=self.from_address, to_addrs=[to])


class LogNotifier(NotifierPort):
    """
    Development transport: writes the message to the log instead of sending it.
    """
    def send(self, message: Message) -> None:
        logger.warning("notifier.log to=%s subject=%s body=%s", message.to, message.subject, message.text_body)


class InMemoryNotifier(NotifierPort):
    """
    Test double. Records every message; `fail_with` makes the next sends raise.
    """
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.outbox: List[Message] = []
        self.fail_with: Optional[Exception] = None

    def send(self, message: Message) -> None:
        with self._lock:
            if self.fail_with is not None:
                raise self.fail_with
            self.outbox.append(message)

    def last_to(self, address: str) -> Optional[Message]:
        with self._lock:
            for m in reversed(self.outbox):
                if m.to == address:
                    return m
            return None
