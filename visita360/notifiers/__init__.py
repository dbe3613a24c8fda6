"""
notifiers/ — Delivery boundary for new notifications.

NotificationStore hands each newly created item to one Notifier. The
notifier owns presentation (log line, webhook card); the store only decides
whether and what to deliver.
"""

from .base import Delivery, Notifier  # noqa: F401
from .log_notifier import LogNotifier  # noqa: F401
from .webhook_notifier import WebhookNotifier  # noqa: F401


def build_notifier(settings) -> Notifier:
    """Webhook when a URL is configured, otherwise log-only."""
    if settings.notification_webhook_url:
        return WebhookNotifier(settings.notification_webhook_url)
    return LogNotifier()
