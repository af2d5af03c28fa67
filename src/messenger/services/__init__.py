# src/messenger/services/__init__.py
"""Business logic services for the messenger core."""

from .accounts import AccountDeletion, AccountService
from .chats import ChatDraft, ChatService, RemovalOutcome
from .ledger import MessageLedger
from .relationships import RelationshipService

__all__ = [
    "AccountDeletion", "AccountService",
    "ChatDraft", "ChatService", "RemovalOutcome",
    "MessageLedger",
    "RelationshipService",
]
