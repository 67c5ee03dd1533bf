import logging
from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.config import MAX_CONVERSATIONS_PER_CONNECTION
from shopfloor_chat.realtime.broadcast import (
    CONVERSATION_GROUP_PREFIX,
    BroadcastGroups,
    conversation_group,
    user_group,
)
from shopfloor_chat.realtime.connection import Connection
from shopfloor_chat.repositories.participant_repository import ParticipantRepository

logger = logging.getLogger(__name__)


class RoomMembershipManager:
    """Adds connections to the broadcast groups they are authorized for."""

    def __init__(
        self,
        groups: BroadcastGroups,
        max_conversations: int = MAX_CONVERSATIONS_PER_CONNECTION,
    ):
        self.groups = groups
        self.max_conversations = max_conversations

    def join_personal_room(self, connection: Connection) -> None:
        self.groups.join(user_group(connection.user_id), connection)

    async def join_rooms(
        self, connection: Connection, conversation_ids: Iterable[int], db: AsyncSession
    ) -> List[int]:
        """Join the conversation groups the user actively participates in.

        Ids the user may not join are dropped silently; the UI may hold stale
        ids. Returns the ids that were joined.
        """
        requested = list(dict.fromkeys(conversation_ids))
        if not requested:
            return []

        authorized = await ParticipantRepository(db).get_active_conversation_ids(
            connection.user_id, requested
        )

        joined: List[int] = []
        for conversation_id in authorized:
            group = conversation_group(conversation_id)
            if group not in connection.groups:
                if self.conversation_count(connection) >= self.max_conversations:
                    logger.warning(
                        "Connection %s reached the limit of %d conversations",
                        connection.id,
                        self.max_conversations,
                    )
                    break
                self.groups.join(group, connection)
            joined.append(conversation_id)

        dropped = len(requested) - len(authorized)
        if dropped:
            logger.debug(
                "User %s not authorized for %d of %d requested conversations",
                connection.user_id,
                dropped,
                len(requested),
            )
        return joined

    def leave_rooms(self, connection: Connection, conversation_ids: Iterable[int]) -> None:
        for conversation_id in conversation_ids:
            self.groups.leave(conversation_group(conversation_id), connection)

    def conversation_count(self, connection: Connection) -> int:
        return sum(
            1 for group in connection.groups
            if group.startswith(CONVERSATION_GROUP_PREFIX)
        )
