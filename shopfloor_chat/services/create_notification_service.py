import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Hashable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.config import NOTIFICATION_DEDUP_WINDOW_SECONDS
from shopfloor_chat.database import utcnow
from shopfloor_chat.models.api.events import NEW_NOTIFICATION
from shopfloor_chat.models.api.notifications import (
    NotificationCreate,
    NotificationResponse,
)
from shopfloor_chat.realtime.broadcast import BroadcastGroups, user_group
from shopfloor_chat.repositories.notification_repository import (
    NotificationRepository,
)

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One asyncio.Lock per key, released from memory once nobody holds it."""

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield


class CreateNotificationService:
    """Creates durable notifications and pushes them to the recipient."""

    def __init__(
        self,
        db: AsyncSession,
        broadcaster: BroadcastGroups,
        locks: Optional[KeyedLocks] = None,
        dedup_window: timedelta = timedelta(seconds=NOTIFICATION_DEDUP_WINDOW_SECONDS),
    ):
        self.db = db
        self.broadcaster = broadcaster
        self.locks = locks or KeyedLocks()
        self.dedup_window = dedup_window
        self.notification_repo = NotificationRepository(db)

    async def create_notification(
        self, user_id: int, notification: NotificationCreate
    ) -> NotificationResponse:
        """
        Create a notification unless an identical one is recent:
        1. Return the existing notification if one with the same user, type,
           title and content was created inside the dedup window
        2. Otherwise save it and push it to the user's personal channel
        """
        key = (user_id, notification.type, notification.title, notification.content)

        async with self.locks.hold(key):
            since = utcnow() - self.dedup_window
            duplicate = await self.notification_repo.find_recent_duplicate(
                user_id, notification, since
            )
            if duplicate is not None:
                logger.debug(
                    "Skipping duplicate notification %s for user %s",
                    duplicate.id,
                    user_id,
                )
                return duplicate

            created = await self.notification_repo.create_notification(
                user_id, notification
            )

        # No-op when the user has no live connection; the row stays for later
        await self.broadcaster.publish(user_group(user_id), NEW_NOTIFICATION, created)
        return created
