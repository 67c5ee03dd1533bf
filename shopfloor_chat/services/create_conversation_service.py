import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.errors import NotFoundError
from shopfloor_chat.models.api.conversations import (
    ConversationResponse,
    CreateConversationRequest,
)
from shopfloor_chat.repositories.conversation_repository import ConversationRepository
from shopfloor_chat.repositories.participant_repository import ParticipantRepository
from shopfloor_chat.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class CreateConversationService:
    """Service for starting conversations and leaving them."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)
        self.user_repo = UserRepository(db)

    async def create_conversation(
        self, creator_id: int, request: CreateConversationRequest
    ) -> ConversationResponse:
        """
        Create a conversation between the creator and the requested users:

        1. Require every requested user to be active
        2. Reuse the existing direct conversation for one-to-one chats
        3. Otherwise create the conversation with all participants
        """
        other_ids: List[int] = [
            user_id
            for user_id in dict.fromkeys(request.participant_ids)
            if user_id != creator_id
        ]
        if not other_ids:
            raise ValueError("A conversation needs at least one other participant")

        active_ids = set(await self.user_repo.get_active_ids(other_ids))
        missing = [user_id for user_id in other_ids if user_id not in active_ids]
        if missing:
            raise NotFoundError(f"Users not found or inactive: {missing}")

        is_group = request.is_group or len(other_ids) > 1
        if not is_group:
            existing = await self.conversation_repo.find_direct_conversation(
                creator_id, other_ids[0]
            )
            if existing:
                # Re-join a direct chat the creator left earlier
                await self.participant_repo.add_participant(existing.id, creator_id)
                return await self.conversation_repo.get_by_id(existing.id) or existing

        conversation = await self.conversation_repo.create_with_participants(
            [creator_id, *other_ids], name=request.name, is_group=is_group
        )
        logger.info(
            "User %s created conversation %s with %d participants",
            creator_id,
            conversation.id,
            len(conversation.participants),
        )
        return conversation

    async def leave_conversation(self, user_id: int, conversation_id: int) -> None:
        """Deactivate the user's membership; history is kept."""
        left = await self.participant_repo.deactivate(conversation_id, user_id)
        if not left:
            raise NotFoundError("Not an active participant of this conversation")
