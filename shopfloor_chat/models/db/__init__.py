# SQLAlchemy database models
from .conversation_model import ConversationModel
from .message_model import MessageModel
from .notification_model import NotificationModel
from .participant_model import ParticipantModel
from .read_receipt_model import ReadReceiptModel
from .user_model import UserModel

__all__ = [
    "ConversationModel",
    "MessageModel",
    "NotificationModel",
    "ParticipantModel",
    "ReadReceiptModel",
    "UserModel",
]
