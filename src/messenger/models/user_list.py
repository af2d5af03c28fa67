# src/messenger/models/user_list.py
"""SQLAlchemy models for contact and block lists."""

from __future__ import annotations

import enum

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from messenger.db.session import Base


class ListKind(str, enum.Enum):
    """Kind of a user-owned list; fixed when the list is created."""

    CONTACT = "contact"
    BLOCK = "block"


class UserList(Base):
    """A typed collection owned by exactly one user."""

    __tablename__ = "user_list"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_type: Mapped[ListKind] = mapped_column(
        Enum(
            ListKind,
            name="list_type",
            native_enum=False,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )


class ListMembership(Base):
    """Join table placing a user login on a list."""

    __tablename__ = "user_list_contains"

    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_list.id"), primary_key=True
    )
    list_member: Mapped[str] = mapped_column(
        String(50), ForeignKey("usr.login"), primary_key=True
    )
