from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import utcnow
from shopfloor_chat.models.api.events import (
    MESSAGES_READ,
    MarkMessagesReadPayload,
    MessagesReadEvent,
)
from shopfloor_chat.realtime.broadcast import BroadcastGroups, conversation_group
from shopfloor_chat.repositories.message_repository import MessageRepository
from shopfloor_chat.repositories.participant_repository import ParticipantRepository
from shopfloor_chat.repositories.read_receipt_repository import ReadReceiptRepository


class MarkMessagesReadService:
    """Records read receipts and advances the reader's watermark."""

    def __init__(self, db: AsyncSession, broadcaster: BroadcastGroups):
        self.db = db
        self.broadcaster = broadcaster
        self.participant_repo = ParticipantRepository(db)
        self.message_repo = MessageRepository(db)
        self.receipt_repo = ReadReceiptRepository(db)

    async def mark_read(
        self,
        user_id: int,
        payload: MarkMessagesReadPayload,
        exclude: Optional[Any] = None,
    ) -> List[int]:
        """
        Mark messages read for a participant:
        1. Silently ignore callers without an active membership
        2. Insert receipts for messages of this conversation, skipping existing
        3. Advance last_read_at (never backwards)
        4. Tell the rest of the conversation which messages were read

        ``exclude`` is the calling connection, which does not get the event.
        Returns the message ids that were recorded.
        """
        conversation_id = payload.conversation_id

        participant = await self.participant_repo.get_active(conversation_id, user_id)
        if participant is None:
            return []

        message_ids = await self.message_repo.get_ids_in_conversation(
            conversation_id, payload.message_ids
        )
        if message_ids:
            await self.receipt_repo.create_many(user_id, message_ids)

        await self.participant_repo.advance_last_read(participant.id, utcnow())

        await self.broadcaster.publish(
            conversation_group(conversation_id),
            MESSAGES_READ,
            MessagesReadEvent(
                user_id=user_id,
                message_ids=message_ids,
                conversation_id=conversation_id,
            ),
            exclude=exclude,
        )
        return message_ids
