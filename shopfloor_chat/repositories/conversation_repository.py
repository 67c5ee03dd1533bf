from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shopfloor_chat.models.api.conversations import ConversationResponse
from shopfloor_chat.models.api.participants import ParticipantResponse
from shopfloor_chat.models.db.conversation_model import ConversationModel
from shopfloor_chat.models.db.participant_model import ParticipantModel
from shopfloor_chat.repositories.base_repository import BaseRepository


class ConversationRepository(BaseRepository[ConversationModel, ConversationResponse]):
    """Repository for conversation operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationModel)

    async def get_by_id(self, id: int) -> Optional[ConversationResponse]:
        """Get a conversation by ID with participants loaded."""
        query = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .options(selectinload(self.model_class.participants))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def list_for_user(
        self, user_id: int, limit: int = 50, offset: int = 0
    ) -> List[ConversationResponse]:
        """List conversations the user actively belongs to, most recent first."""
        query = (
            select(self.model_class)
            .join(self.model_class.participants)
            .where(
                ParticipantModel.user_id == user_id,
                ParticipantModel.is_active.is_(True),
            )
            .options(selectinload(self.model_class.participants))
            .order_by(self.model_class.updated_at.desc(), self.model_class.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        db_models = result.scalars().all()
        return [self._to_pydantic(db_model) for db_model in db_models]

    async def find_direct_conversation(
        self, user_id: int, other_user_id: int
    ) -> Optional[ConversationResponse]:
        """Find the non-group conversation whose only members are the two users."""
        member_ids = {user_id, other_user_id}
        candidates = (
            select(ParticipantModel.conversation_id)
            .where(ParticipantModel.user_id.in_(member_ids))
            .group_by(ParticipantModel.conversation_id)
            .having(func.count(ParticipantModel.user_id) == len(member_ids))
        )
        query = (
            select(self.model_class)
            .where(
                self.model_class.is_group.is_(False),
                self.model_class.id.in_(candidates),
            )
            .options(selectinload(self.model_class.participants))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)

        # Candidates contain both users; keep the one with nobody else in it
        for conversation in result.scalars().all():
            if {p.user_id for p in conversation.participants} == member_ids:
                return self._to_pydantic(conversation)
        return None

    async def create_with_participants(
        self, user_ids: List[int], name: Optional[str] = None, is_group: bool = False
    ) -> ConversationResponse:
        """Create a conversation and its participant rows in one transaction."""
        conversation = ConversationModel(name=name, is_group=is_group)
        conversation.participants = [
            ParticipantModel(user_id=user_id, is_active=True)
            for user_id in dict.fromkeys(user_ids)
        ]
        self.db.add(conversation)
        await self.db.commit()

        # Reload with relationships for _to_pydantic
        created = await self.get_by_id(conversation.id)
        if created is None:
            raise RuntimeError(f"Conversation {conversation.id} vanished after insert")
        return created

    async def touch(
        self, conversation_id: int, at: datetime, commit: bool = True
    ) -> None:
        """Bump the recency timestamp used for conversation list ordering."""
        await self.db.execute(
            update(self.model_class)
            .where(self.model_class.id == conversation_id)
            .values(updated_at=at)
            .execution_options(synchronize_session=False)
        )
        if commit:
            await self.db.commit()

    def _to_pydantic(self, db_model: Any) -> ConversationResponse:
        """Convert SQLAlchemy ConversationModel to Pydantic ConversationResponse."""
        participants = [
            ParticipantResponse(
                id=p.id,
                conversation_id=p.conversation_id,
                user_id=p.user_id,
                is_active=p.is_active,
                joined_at=p.joined_at,
                last_read_at=p.last_read_at,
            )
            for p in sorted(db_model.participants, key=lambda p: p.user_id)
        ]
        return ConversationResponse(
            id=db_model.id,
            name=db_model.name,
            is_group=db_model.is_group,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
            participants=participants,
        )
