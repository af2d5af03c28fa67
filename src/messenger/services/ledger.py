"""Append-only message log scoped to a chat."""
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from messenger.db.time import as_utc, utcnow
from messenger.models.message import Message

__all__ = ["MessageLedger"]

# Smallest step a DateTime column round-trips on every supported backend.
_TICK = timedelta(microseconds=1)


class MessageLedger:
    """Thin wrapper around database access for chat messages.

    Methods take the caller's session so they join the surrounding
    transaction; the caller is expected to hold the chat row lock.
    """

    def append(self, session: Session, chat_id: int, sender_login: str, text: str) -> Message:
        """Insert a message stamped later than every earlier message of the chat."""
        stamp = utcnow()
        last = self.last_timestamp(session, chat_id)
        if last is not None and stamp <= last:
            stamp = last + _TICK
        message = Message(
            chat_id=chat_id,
            sender_login=sender_login,
            msg_text=text,
            msg_timestamp=stamp,
        )
        session.add(message)
        session.flush()
        return message

    def last_timestamp(self, session: Session, chat_id: int) -> datetime | None:
        """Return the newest message timestamp of a chat, if any."""
        value = session.execute(
            select(func.max(Message.msg_timestamp)).where(Message.chat_id == chat_id)
        ).scalar()
        return as_utc(value) if value is not None else None

    def count(self, session: Session, chat_id: int) -> int:
        """Return the number of messages in a chat."""
        return session.execute(
            select(func.count()).select_from(Message).where(Message.chat_id == chat_id)
        ).scalar() or 0

    def list_by_chat(
        self,
        session: Session,
        chat_id: int,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Message]:
        """Return messages of a chat in time order."""
        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.msg_timestamp.asc(), Message.msg_id.asc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.execute(stmt).scalars())

    def purge(self, session: Session, chat_id: int) -> int:
        """Delete every message of a chat; only used by chat cascade deletion."""
        result = session.execute(delete(Message).where(Message.chat_id == chat_id))
        return result.rowcount or 0
