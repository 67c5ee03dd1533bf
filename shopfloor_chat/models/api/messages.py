from datetime import datetime
from enum import Enum

from shopfloor_chat.models.api.base import ApiModel
from shopfloor_chat.models.api.users import SenderProfile


class MessageType(str, Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    FILE = "FILE"


class MessageResponse(ApiModel):
    """Response model for message data."""

    id: int
    conversation_id: int
    sender_id: int
    content: str
    message_type: MessageType
    created_at: datetime


class NewMessageEvent(MessageResponse):
    """Persisted message broadcast to a conversation group."""

    sender: SenderProfile
