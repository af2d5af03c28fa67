# src/messenger/models/user.py
"""SQLAlchemy model for registered users."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from messenger.db.session import Base
from messenger.models.user_list import ListKind


class User(Base):
    """Registered user keyed by login, owning one contact and one block list."""

    __tablename__ = "usr"

    login: Mapped[str] = mapped_column(String(50), primary_key=True)
    phone_num: Mapped[str | None] = mapped_column(String(16), unique=True, nullable=True)
    # SHA-256 hex digest, or the disabled sentinel after a soft delete.
    credential: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_list.id"), nullable=False
    )
    block_list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_list.id"), nullable=False
    )

    def list_id(self, kind: ListKind) -> int:
        """Return the id of the user's list of the given kind."""
        if kind is ListKind.CONTACT:
            return self.contact_list_id
        return self.block_list_id

    @property
    def owned_list_ids(self) -> tuple[int, int]:
        """Return the ids of both lists owned by the user."""
        return (self.contact_list_id, self.block_list_id)
