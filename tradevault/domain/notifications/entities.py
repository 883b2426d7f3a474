"""
Value objects and ports for outbound notifications.

Delivery is at-most-once: a message is handed to each channel a
single time and failures are never retried.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """An email ready to send.

    Attributes:
        to: Recipient address.
        subject: Subject line.
        html: HTML body.
        text: Plain-text alternative body.
    """

    to: str
    subject: str
    html: str
    text: str = ""


class NotificationQueue(ABC):
    """Port for handing messages off the request path."""

    @abstractmethod
    def enqueue(self, message: EmailMessage) -> None:
        """Accept a message for later delivery. Must not block or raise on send failure."""
        raise NotImplementedError


class EmailSender(ABC):
    """Port for a transport that delivers one email."""

    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        """Deliver a message. Raises on transport failure."""
        raise NotImplementedError
