import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from shopfloor_chat.realtime.connection import Connection

logger = logging.getLogger(__name__)

USER_GROUP_PREFIX = "user:"
CONVERSATION_GROUP_PREFIX = "conversation:"


def user_group(user_id: int) -> str:
    """Key of a user's personal channel."""
    return f"{USER_GROUP_PREFIX}{user_id}"


def conversation_group(conversation_id: int) -> str:
    return f"{CONVERSATION_GROUP_PREFIX}{conversation_id}"


class BroadcastGroups:
    """Explicit mapping of group key to the live connections in that group."""

    def __init__(self) -> None:
        self._groups: Dict[str, Set[Connection]] = {}

    def join(self, group: str, connection: Connection) -> None:
        self._groups.setdefault(group, set()).add(connection)
        connection.groups.add(group)

    def leave(self, group: str, connection: Connection) -> None:
        members = self._groups.get(group)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._groups[group]
        connection.groups.discard(group)

    def leave_all(self, connection: Connection) -> None:
        for group in list(connection.groups):
            self.leave(group, connection)

    def members(self, group: str) -> List[Connection]:
        return list(self._groups.get(group, ()))

    def group_count(self) -> int:
        return len(self._groups)

    async def publish(
        self,
        group: str,
        event: str,
        data: Any,
        exclude: Optional[Connection] = None,
    ) -> int:
        """Send an event to every member of a group.

        Returns the number of connections the event was delivered to. A
        failed send to one connection is logged and does not stop the rest.
        """
        # Snapshot so joins/leaves during the awaits do not affect this fanout
        targets = [c for c in self.members(group) if c is not exclude]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(self._safe_send(connection, event, data) for connection in targets)
        )
        return sum(1 for delivered in results if delivered)

    async def _safe_send(self, connection: Connection, event: str, data: Any) -> bool:
        try:
            await connection.send(event, data)
            return True
        except Exception:
            logger.warning(
                "Failed to deliver %s to connection %s", event, connection.id,
                exc_info=True,
            )
            return False
