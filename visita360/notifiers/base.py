"""Notifier contract shared by all delivery channels."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

AUTO_DISMISS_SECONDS = 5


@dataclass
class Delivery:
    """What the notifier receives for one new notification."""

    tag: str
    title: str
    message: str
    priority: str
    require_interaction: bool
    auto_dismiss_seconds: int | None
    on_activate: Callable[[], None] | None = field(default=None, repr=False)


class Notifier(ABC):
    permission = PERMISSION_DEFAULT

    def request_permission(self) -> str:
        """Ask the channel whether it may present notifications."""
        self.permission = PERMISSION_GRANTED
        return self.permission

    @abstractmethod
    def send(self, delivery: Delivery) -> None:
        """Present one notification. Must not raise."""
