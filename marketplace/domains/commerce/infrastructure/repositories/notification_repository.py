"""
SQLAlchemy Notification Repository

Works on its own session factory: inbox writes happen after the business
transaction committed and must not share its fate.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.domains.commerce.application.ports import NotificationRecord
from marketplace.domains.commerce.infrastructure.repositories.mapping import as_utc
from marketplace.models.db import NotificationModel


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def add(self, user_id: str, title: str, body: str, data: dict[str, Any]) -> NotificationRecord:
        async with self.session_factory() as session:
            model = NotificationModel(user_id=user_id, title=title, body=body, data=dict(data))
            session.add(model)
            await session.commit()
            return self._to_record(model)

    async def list_by_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[NotificationRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id)
                .order_by(NotificationModel.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return [self._to_record(model) for model in result.scalars().all()]

    async def mark_read(self, user_id: str, notification_id: UUID) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(NotificationModel)
                .where(NotificationModel.id == notification_id, NotificationModel.user_id == user_id)
                .values(is_read=True)
            )
            await session.commit()
            return result.rowcount == 1

    @staticmethod
    def _to_record(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            body=model.body,
            data=dict(model.data or {}),
            is_read=model.is_read,
            created_at=as_utc(model.created_at),
        )
