"""Webhook notifier — posts a JSON card per new notification.

Business Rules:
- Fire-and-forget: the POST runs as a task on the running loop; errors are
  logged, never raised
- No running loop (e.g. called from a sync script) → logged and skipped
- Permission is granted only when a webhook URL is configured

Called by: services/notification_store.py
Depends on: http_client.py
"""

import asyncio
import logging

import httpx

from ..http_client import http
from .base import PERMISSION_DENIED, PERMISSION_GRANTED, Delivery, Notifier

log = logging.getLogger("visita360.notifiers")


class WebhookNotifier(Notifier):
    def __init__(self, url: str, timeout: float = 10):
        self.url = url
        self.timeout = timeout
        self._tasks: set[asyncio.Task] = set()

    def request_permission(self) -> str:
        self.permission = PERMISSION_GRANTED if self.url else PERMISSION_DENIED
        return self.permission

    @staticmethod
    def build_payload(delivery: Delivery) -> dict:
        return {
            "tag": delivery.tag,
            "title": delivery.title,
            "text": delivery.message,
            "priority": delivery.priority,
            "requireInteraction": delivery.require_interaction,
            "autoDismissSeconds": delivery.auto_dismiss_seconds,
        }

    async def post(self, delivery: Delivery) -> bool:
        """POST one card. Returns True on a 2xx answer."""
        try:
            r = await http.post(self.url, json=self.build_payload(delivery), timeout=self.timeout)
        except httpx.HTTPError as e:
            log.warning("Webhook delivery error for %s: %s", delivery.tag, e)
            return False
        if not r.is_success:
            log.warning("Webhook delivery HTTP %s for %s", r.status_code, delivery.tag)
            return False
        return True

    def send(self, delivery: Delivery) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.warning("No running event loop — webhook delivery skipped for %s", delivery.tag)
            return
        task = loop.create_task(self.post(delivery))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
