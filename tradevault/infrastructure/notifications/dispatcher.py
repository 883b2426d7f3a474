"""
Notification dispatcher.

Delivers an outbound message through every configured channel:
    1. Email via an EmailSender (SMTP in production)
    2. Optional HTTP webhook POST (ops mirror of customer notifications)

Architecture:
    Use case ──▶ NotificationQueue ──▶ worker thread ──▶ NotificationDispatcher
                                                              │
                                                        ┌─────┴─────┐
                                                        │ Channels: │
                                                        │  • Email  │
                                                        │  • Webhook│
                                                        └───────────┘

Each message is handed to each channel exactly once. Failures are
logged and counted, never retried and never raised to the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import httpx

from tradevault.domain.notifications.entities import EmailMessage, EmailSender

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Result of a single channel delivery."""

    channel: str
    success: bool
    error: str | None = None
    latency_ms: float = 0.0


@dataclass
class NotificationSummary:
    """All channel results for one message."""

    subject: str = ""
    results: list[NotificationResult] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def all_success(self) -> bool:
        return all(r.success for r in self.results)


class NotificationDispatcher:
    """Multi-channel notification sender.

    Args:
        email_sender: Transport for the email channel, or None to skip it.
        webhook_url: Optional URL that receives a JSON copy of each message.
        webhook_timeout: HTTP timeout in seconds for webhook calls.
    """

    def __init__(
        self,
        email_sender: Optional[EmailSender] = None,
        webhook_url: Optional[str] = None,
        webhook_timeout: float = 10.0,
    ) -> None:
        if webhook_url:
            parsed = urlparse(webhook_url)
            if parsed.scheme not in ("http", "https"):
                msg = f"Invalid webhook URL scheme: {parsed.scheme}"
                raise ValueError(msg)
        self._email_sender = email_sender
        self._webhook_url = webhook_url
        self._webhook_timeout = webhook_timeout
        self._stats = {
            "messages": 0,
            "emails_sent": 0,
            "webhook_calls": 0,
            "errors": 0,
        }

    @property
    def stats(self) -> dict:
        return dict(self._stats)

    def dispatch(self, message: EmailMessage) -> NotificationSummary:
        """Send one message on every channel.

        Returns:
            NotificationSummary with one result per channel attempted.
        """
        self._stats["messages"] += 1
        summary = NotificationSummary(subject=message.subject)

        if self._email_sender is not None:
            summary.results.append(self._send_email(message))
        if self._webhook_url:
            summary.results.append(self._send_webhook(message))

        return summary

    def _send_email(self, message: EmailMessage) -> NotificationResult:
        start = time.monotonic()
        try:
            self._email_sender.send(message)
        except Exception as exc:
            # Any transport failure ends delivery for this channel.
            self._stats["errors"] += 1
            logger.error("Email '%s' failed: %s", message.subject, exc)
            return NotificationResult(
                channel="email",
                success=False,
                error=str(exc),
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

        self._stats["emails_sent"] += 1
        return NotificationResult(
            channel="email",
            success=True,
            latency_ms=round((time.monotonic() - start) * 1000, 2),
        )

    def _send_webhook(self, message: EmailMessage) -> NotificationResult:
        start = time.monotonic()
        payload = {
            "event": "notification",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "subject": message.subject,
            "text": message.text,
        }
        try:
            with httpx.Client(timeout=self._webhook_timeout) as client:
                resp = client.post(
                    self._webhook_url,
                    json=payload,
                    headers={"X-TradeVault-Event": "notification"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            self._stats["errors"] += 1
            logger.error("Webhook POST to %s failed: %s", self._webhook_url, exc)
            return NotificationResult(
                channel=f"webhook:{self._webhook_url}",
                success=False,
                error=str(exc),
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

        self._stats["webhook_calls"] += 1
        return NotificationResult(
            channel=f"webhook:{self._webhook_url}",
            success=True,
            latency_ms=round((time.monotonic() - start) * 1000, 2),
        )
