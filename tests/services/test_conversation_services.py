from typing import Dict
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.errors import AuthorizationError, NotFoundError
from shopfloor_chat.models.api.conversations import (
    ConversationResponse,
    CreateConversationRequest,
)
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.repositories.message_repository import MessageRepository
from shopfloor_chat.services.create_conversation_service import (
    CreateConversationService,
)
from shopfloor_chat.services.get_conversation_messages_service import (
    GetConversationMessagesService,
)
from shopfloor_chat.services.list_conversations_service import ListConversationsService


class TestListConversationsService:
    """Unit tests for ListConversationsService."""

    @pytest.mark.asyncio
    async def test_list_conversations_default_params(self, mock_db: AsyncMock) -> None:
        """Test listing conversations with default parameters."""
        service = ListConversationsService(mock_db)
        with patch.object(
            service.conversation_repo,
            "list_for_user",
            new_callable=AsyncMock,
            return_value=[],
        ) as mock_list:
            result = await service.list_conversations(7)

        assert result == []
        mock_list.assert_called_once_with(7, limit=50, offset=0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,offset", [(0, 0), (1001, 0), (10, -1)])
    async def test_list_conversations_invalid_paging(
        self, mock_db: AsyncMock, limit: int, offset: int
    ) -> None:
        service = ListConversationsService(mock_db)
        with pytest.raises(ValueError):
            await service.list_conversations(7, limit=limit, offset=offset)

    @pytest.mark.asyncio
    async def test_get_conversation_summary(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        service = ListConversationsService(test_db)

        found = await service.get_conversation_summary(users["bob"].id, conversation.id)
        assert found.id == conversation.id

        with pytest.raises(AuthorizationError):
            await service.get_conversation_summary(users["carol"].id, conversation.id)
        with pytest.raises(NotFoundError):
            await service.get_conversation_summary(users["bob"].id, 9999)


class TestCreateConversationService:
    @pytest.mark.asyncio
    async def test_direct_conversation_is_reused(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        service = CreateConversationService(test_db)

        again = await service.create_conversation(
            users["bob"].id,
            CreateConversationRequest(participant_ids=[users["alice"].id]),
        )

        assert again.id == conversation.id

    @pytest.mark.asyncio
    async def test_left_creator_rejoins_direct_conversation(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        service = CreateConversationService(test_db)
        await service.leave_conversation(users["alice"].id, conversation.id)

        again = await service.create_conversation(
            users["alice"].id,
            CreateConversationRequest(participant_ids=[users["bob"].id]),
        )

        assert again.id == conversation.id
        alice_row = next(p for p in again.participants if p.user_id == users["alice"].id)
        assert alice_row.is_active is True

    @pytest.mark.asyncio
    async def test_several_participants_make_a_group(
        self, test_db: AsyncSession, users: Dict[str, UserResponse]
    ) -> None:
        service = CreateConversationService(test_db)

        created = await service.create_conversation(
            users["alice"].id,
            CreateConversationRequest(
                participant_ids=[users["bob"].id, users["carol"].id, users["alice"].id],
                name="Quality review",
            ),
        )

        assert created.is_group is True
        assert created.name == "Quality review"
        assert sorted(p.user_id for p in created.participants) == sorted(
            [users["alice"].id, users["bob"].id, users["carol"].id]
        )

    @pytest.mark.asyncio
    async def test_inactive_participant_is_rejected(
        self, test_db: AsyncSession, users: Dict[str, UserResponse]
    ) -> None:
        service = CreateConversationService(test_db)
        with pytest.raises(NotFoundError):
            await service.create_conversation(
                users["alice"].id,
                CreateConversationRequest(participant_ids=[users["dave"].id]),
            )

    @pytest.mark.asyncio
    async def test_conversation_with_only_self_is_rejected(
        self, test_db: AsyncSession, users: Dict[str, UserResponse]
    ) -> None:
        service = CreateConversationService(test_db)
        with pytest.raises(ValueError):
            await service.create_conversation(
                users["alice"].id,
                CreateConversationRequest(participant_ids=[users["alice"].id]),
            )

    @pytest.mark.asyncio
    async def test_leave_conversation(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        service = CreateConversationService(test_db)
        await service.leave_conversation(users["bob"].id, conversation.id)

        listed = await ListConversationsService(test_db).list_conversations(
            users["bob"].id
        )
        assert listed == []
        with pytest.raises(NotFoundError):
            await service.leave_conversation(users["bob"].id, conversation.id)


class TestGetConversationMessagesService:
    @pytest.mark.asyncio
    async def test_participant_reads_history(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        repo = MessageRepository(test_db)
        await repo.create_message(conversation.id, users["alice"].id, "morning")
        await repo.create_message(conversation.id, users["bob"].id, "morning!")

        messages = await GetConversationMessagesService(
            test_db
        ).get_conversation_messages(users["alice"].id, conversation.id)

        assert [m.content for m in messages] == ["morning!", "morning"]

    @pytest.mark.asyncio
    async def test_non_participant_is_forbidden(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
    ) -> None:
        service = GetConversationMessagesService(test_db)
        with pytest.raises(AuthorizationError):
            await service.get_conversation_messages(users["carol"].id, conversation.id)

    @pytest.mark.asyncio
    async def test_invalid_limit(self, mock_db: AsyncMock) -> None:
        service = GetConversationMessagesService(mock_db)
        with pytest.raises(ValueError, match="Limit must be between 1 and 1000"):
            await service.get_conversation_messages(1, 1, limit=0)
