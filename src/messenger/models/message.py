# src/messenger/models/message.py
"""Model for chat messages."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from messenger.db.session import Base
from messenger.db.time import utcnow


class Message(Base):
    """Immutable text entry in a chat.

    Rows are only ever inserted; they disappear solely when their chat is
    cascade-deleted.
    """

    __tablename__ = "message"

    msg_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chat.chat_id"), nullable=False, index=True
    )
    sender_login: Mapped[str] = mapped_column(String(50), ForeignKey("usr.login"), nullable=False)
    msg_text: Mapped[str] = mapped_column(Text, nullable=False)
    # Strictly increasing within a chat; assigned by the ledger at append time.
    msg_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
