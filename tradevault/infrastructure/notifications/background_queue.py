"""
Adapter: Background notification queue.

Implements NotificationQueue with an in-process `queue.Queue` drained
by one daemon thread. `enqueue` never blocks the request; the worker
hands each message to the dispatcher once.
"""

import logging
import queue
import threading
from typing import Optional

from tradevault.domain.notifications.entities import EmailMessage, NotificationQueue
from tradevault.infrastructure.notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

_STOP = object()


class BackgroundNotificationQueue(NotificationQueue):
    """Queue plus worker thread.

    Args:
        dispatcher: Sends each dequeued message.
        enabled: When False, messages are logged and dropped.
        maxsize: Queue bound; messages beyond it are dropped with a warning.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        enabled: bool = True,
        maxsize: int = 1000,
    ) -> None:
        self._dispatcher = dispatcher
        self._enabled = enabled
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(
            target=self._run, name="notification-worker", daemon=True
        )
        self._thread.start()
        logger.info("Notification worker started")

    def stop(self, timeout: float = 5.0) -> None:
        """Drain queued messages, then stop the worker."""
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Notification worker stopped")

    def enqueue(self, message: EmailMessage) -> None:
        if not self._enabled:
            logger.info("Notifications disabled; dropping '%s'", message.subject)
            return
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            logger.warning("Notification queue full; dropping '%s'", message.subject)

    def join(self) -> None:
        """Block until every queued message has been processed."""
        self._queue.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                summary = self._dispatcher.dispatch(item)
                if not summary.all_success:
                    logger.warning(
                        "Notification '%s' delivered on %d channel(s) with failures",
                        summary.subject,
                        summary.total_sent,
                    )
            except Exception:
                # The worker must survive any single bad message.
                logger.exception("Notification worker error")
            finally:
                self._queue.task_done()
