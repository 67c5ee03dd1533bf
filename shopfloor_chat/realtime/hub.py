"""Owning service instance for the real-time channel.

One ``RealtimeHub`` lives on ``app.state`` for the lifetime of the process.
It holds the presence directory and broadcast groups, authenticates and
registers connections, runs each connection's receive loop, and tracks the
background notification tasks spawned by message delivery.
"""

import asyncio
import logging
from typing import Any, List, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopfloor_chat.models.api.notifications import (
    NotificationCreate,
    NotificationResponse,
)
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.realtime.authenticator import ConnectionAuthenticator
from shopfloor_chat.realtime.broadcast import (
    BroadcastGroups,
    conversation_group,
    user_group,
)
from shopfloor_chat.realtime.connection import Connection
from shopfloor_chat.realtime.dispatcher import EventDispatcher
from shopfloor_chat.realtime.rooms import RoomMembershipManager
from shopfloor_chat.realtime.session_directory import SessionDirectory
from shopfloor_chat.services.create_notification_service import (
    CreateNotificationService,
    KeyedLocks,
)

logger = logging.getLogger(__name__)


class RealtimeHub:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        authenticator: Optional[ConnectionAuthenticator] = None,
        rooms: Optional[RoomMembershipManager] = None,
    ):
        self.session_factory = session_factory
        self.sessions = SessionDirectory()
        self.groups = BroadcastGroups()
        self.authenticator = authenticator or ConnectionAuthenticator()
        self.rooms = rooms or RoomMembershipManager(self.groups)
        self.dispatcher = EventDispatcher(self)
        self.notification_locks = KeyedLocks()
        self._pending: Set[asyncio.Task] = set()

    # Connection lifecycle

    async def authenticate(self, websocket: WebSocket) -> UserResponse:
        """Resolve the connecting user; raises AuthenticationError."""
        async with self.session_factory() as db:
            return await self.authenticator.authenticate_connection(websocket, db)

    async def connect(self, websocket: WebSocket, user: UserResponse) -> Connection:
        await websocket.accept()
        connection = Connection(websocket, user)
        self.sessions.register(user.id, connection.id)
        self.rooms.join_personal_room(connection)
        logger.info(
            "User %s connected with connection %s", user.username, connection.id
        )
        return connection

    async def disconnect(self, connection: Connection) -> None:
        self.sessions.unregister(connection.user_id, connection.id)
        self.groups.leave_all(connection)
        logger.info(
            "User %s disconnected (connection %s)",
            connection.user.username,
            connection.id,
        )

    async def serve(self, connection: Connection) -> None:
        """Handle this connection's frames one at a time until it closes."""
        while True:
            message = await connection.websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(
                    message.get("code", 1000), message.get("reason")
                )
            await self.dispatcher.dispatch_message(connection, message)

    # Notifications

    async def create_notification(
        self, user_id: int, notification: NotificationCreate
    ) -> NotificationResponse:
        async with self.session_factory() as db:
            service = CreateNotificationService(
                db, self.groups, locks=self.notification_locks
            )
            return await service.create_notification(user_id, notification)

    def spawn_notification(
        self, user_id: int, notification: NotificationCreate
    ) -> asyncio.Task:
        """Create a notification in the background; failures are only logged."""
        task = asyncio.create_task(self._notify_safely(user_id, notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _notify_safely(
        self, user_id: int, notification: NotificationCreate
    ) -> None:
        try:
            await self.create_notification(user_id, notification)
        except Exception:
            logger.exception("Failed to create notification for user %s", user_id)

    async def drain(self) -> None:
        """Wait for background notification tasks spawned so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)

    # Helpers for collaborators outside the real-time channel

    async def send_to_user(self, user_id: int, event: str, data: Any) -> int:
        return await self.groups.publish(user_group(user_id), event, data)

    async def send_to_conversation(
        self, conversation_id: int, event: str, data: Any
    ) -> int:
        return await self.groups.publish(conversation_group(conversation_id), event, data)

    def leave_conversation(self, user_id: int, conversation_id: int) -> None:
        """Remove every live connection of a user from a conversation group."""
        for connection in self.groups.members(user_group(user_id)):
            self.rooms.leave_rooms(connection, [conversation_id])

    def is_user_online(self, user_id: int) -> bool:
        return self.sessions.is_online(user_id)

    def get_online_users(self) -> List[int]:
        return self.sessions.online_users()
