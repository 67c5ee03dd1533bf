# API models for request/response contracts
from .conversations import ConversationResponse, CreateConversationRequest
from .messages import MessageResponse, MessageType, NewMessageEvent
from .notifications import (
    MarkNotificationsReadRequest,
    NotificationCreate,
    NotificationResponse,
    NotificationType,
)
from .participants import ParticipantResponse
from .users import SenderProfile, UserResponse

__all__ = [
    "ConversationResponse",
    "CreateConversationRequest",
    "MessageResponse",
    "MessageType",
    "NewMessageEvent",
    "MarkNotificationsReadRequest",
    "NotificationCreate",
    "NotificationResponse",
    "NotificationType",
    "ParticipantResponse",
    "SenderProfile",
    "UserResponse",
]
