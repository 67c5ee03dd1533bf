from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from shopfloor_chat.database import Base, utcnow


class MessageModel(Base):
    """SQLAlchemy model for messages table."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False, index=True
    )
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(String(10), nullable=False, default="TEXT")
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    conversation = relationship("ConversationModel", back_populates="messages")

    # Constraints (enforced by database CHECK constraints in the migration)
    # message_type IN ('TEXT', 'IMAGE', 'FILE')
