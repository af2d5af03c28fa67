# src/messenger/models/chat.py
"""SQLAlchemy models for chats and their membership."""

from __future__ import annotations

import enum

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from messenger.db.session import Base


class ChatType(str, enum.Enum):
    """Chat type derived from membership size."""

    PRIVATE = "private"
    GROUP = "group"


class Chat(Base):
    """Conversation started by an initiator."""

    __tablename__ = "chat"

    chat_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chat_type: Mapped[ChatType] = mapped_column(
        Enum(
            ChatType,
            name="chat_type",
            native_enum=False,
            values_callable=lambda types: [chat_type.value for chat_type in types],
        ),
        nullable=False,
        default=ChatType.PRIVATE,
    )
    init_sender: Mapped[str] = mapped_column(
        String(50), ForeignKey("usr.login"), nullable=False, index=True
    )


class ChatMembership(Base):
    """Join table mapping users into chats."""

    __tablename__ = "chat_list"

    chat_id: Mapped[int] = mapped_column(Integer, ForeignKey("chat.chat_id"), primary_key=True)
    member: Mapped[str] = mapped_column(String(50), ForeignKey("usr.login"), primary_key=True)
    # No timestamps; presence implies membership.
