from typing import Dict, List, Set


class SessionDirectory:
    """Tracks which connections are live for each authenticated user.

    A user with at least one live connection is online. Removing the last
    connection drops the user's entry entirely. State is process-local and
    starts empty after a restart.
    """

    def __init__(self) -> None:
        # user_id -> connection ids
        self._connections: Dict[int, Set[str]] = {}

    def register(self, user_id: int, connection_id: str) -> None:
        self._connections.setdefault(user_id, set()).add(connection_id)

    def unregister(self, user_id: int, connection_id: str) -> None:
        connection_ids = self._connections.get(user_id)
        if connection_ids is None:
            return
        connection_ids.discard(connection_id)
        if not connection_ids:
            del self._connections[user_id]

    def is_online(self, user_id: int) -> bool:
        return user_id in self._connections

    def online_users(self) -> List[int]:
        return list(self._connections)

    def connection_ids(self, user_id: int) -> Set[str]:
        return set(self._connections.get(user_id, ()))
