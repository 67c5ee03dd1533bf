"""create chat schema

Revision ID: 5b1e7c2a9d40
Revises:
Create Date: 2025-09-22 10:12:04.318552

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5b1e7c2a9d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Step 1: Create tables (users may already exist, owned by the accounts service)
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(100) NOT NULL UNIQUE,
            email VARCHAR(255) NOT NULL UNIQUE,
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            role VARCHAR(20) NOT NULL DEFAULT 'OPERATOR',
            status VARCHAR(20) NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive', 'suspended')),
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS conversations (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255),
            is_group BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS conversation_participants (
            id SERIAL PRIMARY KEY,
            conversation_id INTEGER NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES users(id),
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            joined_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
            last_read_at TIMESTAMP WITH TIME ZONE,
            CONSTRAINT uq_participant_user UNIQUE (conversation_id, user_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS messages (
            id SERIAL PRIMARY KEY,
            conversation_id INTEGER NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
            sender_id INTEGER NOT NULL REFERENCES users(id),
            content TEXT NOT NULL CHECK (length(content) > 0),
            message_type VARCHAR(10) NOT NULL DEFAULT 'TEXT' CHECK (message_type IN ('TEXT', 'IMAGE', 'FILE')),
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS message_read_receipts (
            id SERIAL PRIMARY KEY,
            message_id INTEGER NOT NULL REFERENCES messages(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES users(id),
            read_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
            CONSTRAINT uq_read_receipt_user UNIQUE (message_id, user_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id),
            type VARCHAR(30) NOT NULL CHECK (type IN ('NEW_MESSAGE', 'MENTION', 'SYSTEM', 'PERFORMANCE_ALERT')),
            title VARCHAR(255) NOT NULL,
            content TEXT NOT NULL,
            data JSONB,
            is_read BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
        )
    """)

    # Step 2: Create indexes (skip if they already exist)
    op.execute('CREATE INDEX IF NOT EXISTS ix_conversations_updated_at ON conversations(updated_at DESC)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_conversation_participants_conversation_id ON conversation_participants(conversation_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_conversation_participants_user_id ON conversation_participants(user_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_messages_conversation_id ON messages(conversation_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_messages_created_at ON messages(created_at DESC)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_message_read_receipts_user_id ON message_read_receipts(user_id)')
    op.execute('CREATE INDEX IF NOT EXISTS idx_notifications_dedup ON notifications(user_id, type, created_at)')


def downgrade() -> None:
    """Downgrade schema."""
    op.execute('DROP TABLE IF EXISTS notifications')
    op.execute('DROP TABLE IF EXISTS message_read_receipts')
    op.execute('DROP TABLE IF EXISTS messages')
    op.execute('DROP TABLE IF EXISTS conversation_participants')
    op.execute('DROP TABLE IF EXISTS conversations')
    # users is shared with the accounts service and is left in place
