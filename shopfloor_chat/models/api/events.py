"""Payloads exchanged over the real-time channel.

Frames are JSON objects shaped ``{"event": <name>, "data": <payload>}``.
"""

from typing import List

from pydantic import Field, TypeAdapter

from shopfloor_chat.models.api.base import ApiModel
from shopfloor_chat.models.api.messages import MessageType

# client -> server
JOIN_CONVERSATIONS = "join_conversations"
SEND_MESSAGE = "send_message"
TYPING_START = "typing_start"
TYPING_STOP = "typing_stop"
MARK_MESSAGES_READ = "mark_messages_read"

# server -> client
CONVERSATIONS_JOINED = "conversations_joined"
NEW_MESSAGE = "new_message"
USER_TYPING = "user_typing"
USER_STOPPED_TYPING = "user_stopped_typing"
MESSAGES_READ = "messages_read"
NEW_NOTIFICATION = "new_notification"
MESSAGE_ERROR = "message_error"


JoinConversationsPayload = TypeAdapter(List[int])


class SendMessagePayload(ApiModel):
    conversation_id: int
    content: str = Field(..., min_length=1)
    message_type: MessageType = MessageType.TEXT


class TypingPayload(ApiModel):
    conversation_id: int


class MarkMessagesReadPayload(ApiModel):
    conversation_id: int
    message_ids: List[int]


class TypingEvent(ApiModel):
    user_id: int
    username: str
    conversation_id: int


class MessagesReadEvent(ApiModel):
    user_id: int
    message_ids: List[int]
    conversation_id: int


class MessageErrorEvent(ApiModel):
    error: str
