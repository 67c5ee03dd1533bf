from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.errors import AuthorizationError, NotFoundError
from shopfloor_chat.models.api.conversations import ConversationResponse
from shopfloor_chat.repositories.conversation_repository import ConversationRepository


class ListConversationsService:
    """Service for listing a user's conversations with pagination."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)

    async def list_conversations(
        self,
        user_id: int,
        limit: Optional[int] = 50,
        offset: Optional[int] = 0,
    ) -> List[ConversationResponse]:
        """
        List conversations the user actively participates in:

        1. Validate pagination
        2. Retrieve conversations ordered by most recent activity
        """
        # Validate parameters
        if limit is not None and (limit <= 0 or limit > 1000):
            raise ValueError("Limit must be between 1 and 1000")
        if offset is not None and offset < 0:
            raise ValueError("Offset must be non-negative")

        # Use default values if None
        limit = limit or 50
        offset = offset or 0

        return await self.conversation_repo.list_for_user(
            user_id, limit=limit, offset=offset
        )

    async def get_conversation_summary(
        self, user_id: int, conversation_id: int
    ) -> ConversationResponse:
        """Get a conversation the user actively participates in."""
        conversation = await self.conversation_repo.get_by_id(conversation_id)
        if not conversation:
            raise NotFoundError(f"Conversation with ID {conversation_id} not found")
        if not any(
            p.user_id == user_id and p.is_active for p in conversation.participants
        ):
            raise AuthorizationError("Not a participant of this conversation")
        return conversation
