# Repository classes for database operations
from .base_repository import BaseRepository
from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .notification_repository import NotificationRepository
from .participant_repository import ParticipantRepository
from .read_receipt_repository import ReadReceiptRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "MessageRepository",
    "NotificationRepository",
    "ParticipantRepository",
    "ReadReceiptRepository",
    "UserRepository",
]
