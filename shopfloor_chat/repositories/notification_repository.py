from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shopfloor_chat.models.api.notifications import (
    NotificationCreate,
    NotificationResponse,
)
from shopfloor_chat.models.db.notification_model import NotificationModel
from shopfloor_chat.repositories.base_repository import BaseRepository


class NotificationRepository(BaseRepository[NotificationModel, NotificationResponse]):
    """Repository for notification operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, NotificationModel)

    async def find_recent_duplicate(
        self, user_id: int, notification: NotificationCreate, since: datetime
    ) -> Optional[NotificationResponse]:
        """Find a notification with identical user, type, title and content
        created at or after ``since``."""
        query = (
            select(self.model_class)
            .where(
                self.model_class.user_id == user_id,
                self.model_class.type == notification.type.value,
                self.model_class.title == notification.title,
                self.model_class.content == notification.content,
                self.model_class.created_at >= since,
            )
            .order_by(self.model_class.created_at.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def create_notification(
        self, user_id: int, notification: NotificationCreate
    ) -> NotificationResponse:
        return await self._save(
            NotificationModel(
                user_id=user_id,
                type=notification.type.value,
                title=notification.title,
                content=notification.content,
                data=notification.data,
                is_read=False,
            )
        )

    async def list_for_user(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        unread_only: bool = False,
    ) -> List[NotificationResponse]:
        """List a user's notifications, newest first."""
        query = select(self.model_class).where(self.model_class.user_id == user_id)
        if unread_only:
            query = query.where(self.model_class.is_read.is_(False))
        query = (
            query.order_by(
                self.model_class.created_at.desc(), self.model_class.id.desc()
            )
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    async def count_unread(self, user_id: int) -> int:
        query = select(func.count(self.model_class.id)).where(
            self.model_class.user_id == user_id,
            self.model_class.is_read.is_(False),
        )
        result = await self.db.execute(query)
        return int(result.scalar() or 0)

    async def mark_read(
        self, user_id: int, notification_ids: Optional[List[int]] = None
    ) -> int:
        """Mark the user's notifications read; all unread ones when ids is None."""
        stmt = update(self.model_class).where(
            self.model_class.user_id == user_id,
            self.model_class.is_read.is_(False),
        )
        if notification_ids is not None:
            stmt = stmt.where(self.model_class.id.in_(notification_ids))

        result = await self.db.execute(
            stmt.values(is_read=True).execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount

    def _to_pydantic(self, db_model: Any) -> NotificationResponse:
        """Convert SQLAlchemy NotificationModel to Pydantic NotificationResponse."""
        return NotificationResponse(
            id=db_model.id,
            user_id=db_model.user_id,
            type=db_model.type,
            title=db_model.title,
            content=db_model.content,
            data=db_model.data,
            is_read=db_model.is_read,
            created_at=db_model.created_at,
        )
