# src/messenger/schemas/__init__.py
"""
Pydantic schemas for engine results.

These schemas define the shape of data handed back to the presentation layer.
"""

from .chat import ChatSummary, MessageOut, MessagePage
from .common import Confirmation
from .user import ListMemberOut, UserOut

__all__ = [
    "ChatSummary", "MessageOut", "MessagePage",
    "Confirmation",
    "ListMemberOut", "UserOut",
]
