from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.models.api.notifications import NotificationResponse
from shopfloor_chat.repositories.notification_repository import (
    NotificationRepository,
)


class ListNotificationsService:
    """Service for reading and acknowledging stored notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notification_repo = NotificationRepository(db)

    async def list_notifications(
        self,
        user_id: int,
        limit: Optional[int] = 50,
        offset: Optional[int] = 0,
        unread_only: bool = False,
    ) -> List[NotificationResponse]:
        if limit is not None and (limit <= 0 or limit > 1000):
            raise ValueError("Limit must be between 1 and 1000")
        if offset is not None and offset < 0:
            raise ValueError("Offset must be non-negative")

        return await self.notification_repo.list_for_user(
            user_id, limit=limit or 50, offset=offset or 0, unread_only=unread_only
        )

    async def count_unread(self, user_id: int) -> int:
        return await self.notification_repo.count_unread(user_id)

    async def mark_read(
        self, user_id: int, notification_ids: Optional[List[int]] = None
    ) -> int:
        """Mark notifications read; every unread one when no ids are given."""
        if notification_ids is not None and not notification_ids:
            return 0
        return await self.notification_repo.mark_read(user_id, notification_ids)
