from typing import Any, Callable, Dict

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.models.api.conversations import ConversationResponse
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.realtime.broadcast import BroadcastGroups, conversation_group
from shopfloor_chat.realtime.connection import Connection
from shopfloor_chat.realtime.rooms import RoomMembershipManager
from shopfloor_chat.repositories.participant_repository import ParticipantRepository


class TestRoomMembershipManager:
    @pytest.mark.asyncio
    async def test_partial_join_returns_only_authorized_ids(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
        group_conversation: ConversationResponse,
        fake_websocket: Callable[..., Any],
    ) -> None:
        groups = BroadcastGroups()
        rooms = RoomMembershipManager(groups)
        carol = Connection(fake_websocket(), users["carol"])

        joined = await rooms.join_rooms(
            carol, [conversation.id, group_conversation.id, 9999], test_db
        )

        assert joined == [group_conversation.id]
        assert conversation_group(group_conversation.id) in carol.groups
        assert conversation_group(conversation.id) not in carol.groups

    @pytest.mark.asyncio
    async def test_rejoining_is_idempotent(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
        fake_websocket: Callable[..., Any],
    ) -> None:
        groups = BroadcastGroups()
        rooms = RoomMembershipManager(groups)
        alice = Connection(fake_websocket(), users["alice"])

        assert await rooms.join_rooms(alice, [conversation.id], test_db) == [conversation.id]
        assert await rooms.join_rooms(
            alice, [conversation.id, conversation.id], test_db
        ) == [conversation.id]
        assert groups.members(conversation_group(conversation.id)) == [alice]

    @pytest.mark.asyncio
    async def test_conversation_limit_per_connection(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
        group_conversation: ConversationResponse,
        fake_websocket: Callable[..., Any],
    ) -> None:
        rooms = RoomMembershipManager(BroadcastGroups(), max_conversations=1)
        alice = Connection(fake_websocket(), users["alice"])
        rooms.join_personal_room(alice)

        joined = await rooms.join_rooms(
            alice, [conversation.id, group_conversation.id], test_db
        )

        assert joined == [conversation.id]
        # The personal room does not count against the limit
        assert rooms.conversation_count(alice) == 1

    @pytest.mark.asyncio
    async def test_left_participant_cannot_join(
        self,
        test_db: AsyncSession,
        users: Dict[str, UserResponse],
        conversation: ConversationResponse,
        fake_websocket: Callable[..., Any],
    ) -> None:
        await ParticipantRepository(test_db).deactivate(conversation.id, users["bob"].id)
        rooms = RoomMembershipManager(BroadcastGroups())
        bob = Connection(fake_websocket(), users["bob"])

        assert await rooms.join_rooms(bob, [conversation.id], test_db) == []

    def test_leave_rooms(self, bare_connection: Connection) -> None:
        groups = BroadcastGroups()
        rooms = RoomMembershipManager(groups)
        groups.join(conversation_group(1), bare_connection)
        groups.join(conversation_group(2), bare_connection)

        rooms.leave_rooms(bare_connection, [1])

        assert bare_connection.groups == {conversation_group(2)}


@pytest.fixture
def bare_connection(fake_websocket: Callable[..., Any]) -> Connection:
    return Connection(
        fake_websocket(),
        UserResponse(
            id=1,
            username="alice",
            email="alice@plant.example.com",
            role="OPERATOR",
            status="active",
        ),
    )
