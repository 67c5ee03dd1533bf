# Real-time event channel: connections, presence, broadcast groups
from .broadcast import BroadcastGroups, conversation_group, user_group
from .connection import Connection
from .session_directory import SessionDirectory

__all__ = [
    "BroadcastGroups",
    "Connection",
    "SessionDirectory",
    "conversation_group",
    "user_group",
]
