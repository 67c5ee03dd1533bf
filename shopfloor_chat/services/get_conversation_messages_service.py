from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.errors import AuthorizationError
from shopfloor_chat.models.api.messages import MessageResponse
from shopfloor_chat.repositories.message_repository import MessageRepository
from shopfloor_chat.repositories.participant_repository import ParticipantRepository


class GetConversationMessagesService:
    """Service for retrieving the message history of a conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.participant_repo = ParticipantRepository(db)
        self.message_repo = MessageRepository(db)

    async def get_conversation_messages(
        self,
        user_id: int,
        conversation_id: int,
        limit: Optional[int] = 50,
        offset: Optional[int] = 0,
    ) -> List[MessageResponse]:
        """
        Get a page of messages for a conversation:

        1. Validate pagination
        2. Verify the caller is an active participant
        3. Retrieve messages newest first
        """
        # Validate parameters
        if limit is not None and (limit <= 0 or limit > 1000):
            raise ValueError("Limit must be between 1 and 1000")
        if offset is not None and offset < 0:
            raise ValueError("Offset must be non-negative")

        limit = limit or 50
        offset = offset or 0

        participant = await self.participant_repo.get_active(conversation_id, user_id)
        if participant is None:
            raise AuthorizationError("Not a participant of this conversation")

        return await self.message_repo.get_by_conversation(
            conversation_id, limit=limit, offset=offset
        )
