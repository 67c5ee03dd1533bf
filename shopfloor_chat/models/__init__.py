# Export all models
from .api import (
    ConversationResponse,
    CreateConversationRequest,
    MarkNotificationsReadRequest,
    MessageResponse,
    MessageType,
    NewMessageEvent,
    NotificationCreate,
    NotificationResponse,
    NotificationType,
    ParticipantResponse,
    SenderProfile,
    UserResponse,
)
from .db import (
    ConversationModel,
    MessageModel,
    NotificationModel,
    ParticipantModel,
    ReadReceiptModel,
    UserModel,
)

__all__ = [
    # API models
    "ConversationResponse",
    "CreateConversationRequest",
    "MarkNotificationsReadRequest",
    "MessageResponse",
    "MessageType",
    "NewMessageEvent",
    "NotificationCreate",
    "NotificationResponse",
    "NotificationType",
    "ParticipantResponse",
    "SenderProfile",
    "UserResponse",
    # DB models
    "ConversationModel",
    "MessageModel",
    "NotificationModel",
    "ParticipantModel",
    "ReadReceiptModel",
    "UserModel",
]
