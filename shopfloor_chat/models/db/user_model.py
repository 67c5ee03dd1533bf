from sqlalchemy import Boolean, Column, DateTime, Integer, String

from shopfloor_chat.database import Base, utcnow


class UserModel(Base):
    """SQLAlchemy model for users table.

    Rows are owned by the account management API; the chat core only reads
    them to authenticate connections and build sender profiles.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    role = Column(String(20), nullable=False, default="OPERATOR")
    status = Column(String(20), nullable=False, default="active")
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Constraints (enforced by database CHECK constraints in the migration)
    # status IN ('active', 'inactive', 'suspended')
