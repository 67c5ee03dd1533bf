import asyncio
import uuid
from typing import Any, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from shopfloor_chat.models.api.users import UserResponse


class Connection:
    """Per-socket context passed explicitly to every event handler."""

    def __init__(self, websocket: WebSocket, user: UserResponse):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.user = user
        # Broadcast group keys this connection belongs to
        self.groups: Set[str] = set()
        self._send_lock = asyncio.Lock()

    @property
    def user_id(self) -> int:
        return self.user.id

    async def send(self, event: str, data: Any) -> None:
        """Send one ``{"event", "data"}`` frame; frames never interleave."""
        frame = {"event": event, "data": jsonable_encoder(data)}
        async with self._send_lock:
            await self.websocket.send_json(frame)

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, user_id={self.user_id})"
