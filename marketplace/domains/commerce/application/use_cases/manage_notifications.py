"""
Notification Inbox Use Cases
"""

from typing import Any
from uuid import UUID

from marketplace.core.domain import EntityNotFoundException
from marketplace.domains.commerce.application.ports import INotificationRepository, NotificationRecord


def _to_dict(record: NotificationRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "title": record.title,
        "body": record.body,
        "data": record.data,
        "is_read": record.is_read,
        "created_at": record.created_at.isoformat(),
    }


class ListNotificationsUseCase:
    """Use Case: List Notifications (newest first)"""

    def __init__(self, notification_repository: INotificationRepository):
        self.notification_repository = notification_repository

    async def execute(self, user_id: str, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        records = await self.notification_repository.list_by_user(user_id, limit=limit, offset=offset)
        return [_to_dict(record) for record in records]


class MarkNotificationReadUseCase:
    """Use Case: Mark Notification Read"""

    def __init__(self, notification_repository: INotificationRepository):
        self.notification_repository = notification_repository

    async def execute(self, user_id: str, notification_id: UUID) -> None:
        if not await self.notification_repository.mark_read(user_id, notification_id):
            raise EntityNotFoundException("Notification", notification_id, message="Notification not found")


__all__ = ["ListNotificationsUseCase", "MarkNotificationReadUseCase"]
