# src/messenger/models/__init__.py
"""SQLAlchemy models for the messenger core."""

from .chat import Chat, ChatMembership, ChatType
from .message import Message
from .user import User
from .user_list import ListKind, ListMembership, UserList

__all__ = [
    "Chat", "ChatMembership", "ChatType",
    "Message",
    "User",
    "ListKind", "ListMembership", "UserList",
]
