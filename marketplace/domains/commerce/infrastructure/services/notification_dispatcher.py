"""
Notification Dispatcher

Writes the in-app inbox row, then relays a push message over HTTP when a
push endpoint is configured. Delivery is at-most-once: failures are
logged and dropped.
"""

import logging
from typing import Any

import httpx

from marketplace.domains.commerce.application.ports import INotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """INotificationDispatcher over the inbox repository and a push relay."""

    def __init__(
        self,
        repository: INotificationRepository,
        http_client: httpx.AsyncClient | None = None,
        push_url: str | None = None,
    ):
        self.repository = repository
        self.http_client = http_client
        self.push_url = push_url

    async def notify(self, user_id: str, title: str, body: str, data: dict[str, Any] | None = None) -> None:
        payload = {key: str(value) for key, value in (data or {}).items()}

        try:
            await self.repository.add(user_id, title, body, payload)
        except Exception as e:
            logger.error(f"Failed to store notification for {user_id}: {e}")

        if not self.push_url or self.http_client is None:
            return

        try:
            response = await self.http_client.post(
                self.push_url,
                json={"user_id": user_id, "title": title, "body": body, "data": payload},
            )
            response.raise_for_status()
            logger.debug(f"Push sent to {user_id}: {title}")
        except httpx.HTTPError as e:
            logger.warning(f"Push delivery to {user_id} failed: {e}")
