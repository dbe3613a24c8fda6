"""Log notifier — new notifications become log lines (default channel)."""

from collections import deque

from loguru import logger

from .base import Delivery, Notifier


class LogNotifier(Notifier):
    def __init__(self, history: int = 100):
        self.sent: deque[Delivery] = deque(maxlen=history)

    def send(self, delivery: Delivery) -> None:
        self.sent.append(delivery)
        log = logger.warning if delivery.require_interaction else logger.info
        log(
            "Notification [{}] {}: {}",
            delivery.priority,
            delivery.title,
            delivery.message,
        )
