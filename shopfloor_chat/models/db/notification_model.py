from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from shopfloor_chat.database import Base, utcnow


class NotificationModel(Base):
    """SQLAlchemy model for notifications table."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_dedup", "user_id", "type", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    data = Column(JSON)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Constraints (enforced by database CHECK constraints in the migration)
    # type IN ('NEW_MESSAGE', 'MENTION', 'SYSTEM', 'PERFORMANCE_ALERT')
