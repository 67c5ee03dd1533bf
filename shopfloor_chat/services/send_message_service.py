import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.config import NOTIFICATION_PREVIEW_LENGTH
from shopfloor_chat.errors import AuthorizationError, PersistenceError
from shopfloor_chat.models.api.events import NEW_MESSAGE, SendMessagePayload
from shopfloor_chat.models.api.messages import MessageResponse, NewMessageEvent
from shopfloor_chat.models.api.notifications import (
    NotificationCreate,
    NotificationType,
)
from shopfloor_chat.models.api.users import SenderProfile, UserResponse
from shopfloor_chat.realtime.broadcast import BroadcastGroups, conversation_group
from shopfloor_chat.repositories.conversation_repository import ConversationRepository
from shopfloor_chat.repositories.message_repository import MessageRepository
from shopfloor_chat.repositories.participant_repository import ParticipantRepository

logger = logging.getLogger(__name__)

# Schedules notification creation for one recipient without awaiting it
NotifyCallback = Callable[[int, NotificationCreate], object]


def truncate_preview(content: str, limit: int = NOTIFICATION_PREVIEW_LENGTH) -> str:
    """Shorten message content for a notification body."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


class SendMessageService:
    """Persists a chat message and fans it out to the conversation."""

    def __init__(
        self,
        db: AsyncSession,
        broadcaster: BroadcastGroups,
        notify: Optional[NotifyCallback] = None,
    ):
        self.db = db
        self.broadcaster = broadcaster
        self.notify = notify
        self.message_repo = MessageRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)

    async def send_message(
        self, sender: UserResponse, payload: SendMessagePayload
    ) -> MessageResponse:
        """
        Deliver a message:
        1. Verify the sender is an active participant
        2. Save the message and bump the conversation's recency
        3. Broadcast it to the conversation group
        4. Queue notifications for the other participants
        """
        conversation_id = payload.conversation_id

        # Step 1: Authorize
        try:
            participant = await self.participant_repo.get_active(
                conversation_id, sender.id
            )
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError("Failed to send message") from e
        if participant is None:
            raise AuthorizationError(
                "Not authorized to send message to this conversation"
            )

        # Step 2: Persist the message and the recency bump in one transaction
        try:
            message = await self.message_repo.create_message(
                conversation_id=conversation_id,
                sender_id=sender.id,
                content=payload.content,
                message_type=payload.message_type,
                commit=False,
            )
            await self.conversation_repo.touch(
                conversation_id, message.created_at, commit=False
            )
            await self.db.commit()
        except (SQLAlchemyError, OSError) as e:
            await self.db.rollback()
            raise PersistenceError("Failed to send message") from e

        # Step 3: Broadcast, only after the message is committed
        event = NewMessageEvent(
            **message.model_dump(), sender=SenderProfile.from_user(sender)
        )
        await self.broadcaster.publish(
            conversation_group(conversation_id), NEW_MESSAGE, event
        )

        # Step 4: Notifications are best-effort relative to delivery
        await self._queue_notifications(sender, message)

        return message

    async def _queue_notifications(
        self, sender: UserResponse, message: MessageResponse
    ) -> None:
        if self.notify is None:
            return

        try:
            recipients: List[int] = await self.participant_repo.get_active_user_ids(
                message.conversation_id, exclude_user_id=sender.id
            )
        except (SQLAlchemyError, OSError):
            logger.exception(
                "Could not load recipients for message %s; notifications skipped",
                message.id,
            )
            return

        notification = self.build_notification(sender, message)
        for user_id in recipients:
            self.notify(user_id, notification)

    @staticmethod
    def build_notification(
        sender: UserResponse, message: MessageResponse
    ) -> NotificationCreate:
        return NotificationCreate(
            type=NotificationType.NEW_MESSAGE,
            title=f"New message from {sender.username}",
            content=truncate_preview(message.content),
            data={
                "conversationId": message.conversation_id,
                "messageId": message.id,
                "senderId": sender.id,
            },
        )
