"""Contact and block list rules."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.core.errors import AlreadyMember, NotMember, SelfReference, UnknownUser
from messenger.db.store import Store
from messenger.models import ListKind, ListMembership, User, UserList
from messenger.schemas.user import ListMemberOut

logger = logging.getLogger(__name__)

__all__ = ["RelationshipService"]


class RelationshipService:
    """Service enforcing the invariants of a user's contact and block lists.

    A user never appears on their own lists and a (list, member) pair exists
    at most once. Contact and block membership are independent: the same
    target may sit on both lists of one owner.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    def add_to_list(
        self, actor: str, kind: ListKind, target: str, *, timeout: float | None = None
    ) -> None:
        """Put ``target`` on the actor's list of ``kind``.

        Raises:
            SelfReference: If the actor targets themself.
            UnknownUser: If the actor or target is not registered.
            AlreadyMember: If the target is already on the list.
        """
        if target == actor:
            raise SelfReference(f"{actor} cannot be added to their own {kind.value} list")

        with self.store.transaction(timeout) as session:
            list_id = self._lock_owned_list(session, actor, kind)
            if session.get(User, target) is None:
                raise UnknownUser(f"User {target!r} does not exist")
            if self._is_listed(session, list_id, target):
                raise AlreadyMember(f"{target} is already in the {kind.value} list")

            session.add(ListMembership(list_id=list_id, list_member=target))
            try:
                session.flush()
            except IntegrityError as exc:
                # A concurrent insert won the race for the same pair.
                raise AlreadyMember(f"{target} is already in the {kind.value} list") from exc

        logger.info("%s added %s to %s list", actor, target, kind.value)

    def remove_from_list(
        self, actor: str, kind: ListKind, target: str, *, timeout: float | None = None
    ) -> None:
        """Take ``target`` off the actor's list of ``kind``.

        Raises:
            UnknownUser: If the actor is not registered.
            NotMember: If the target is not on the list.
        """
        with self.store.transaction(timeout) as session:
            list_id = self._lock_owned_list(session, actor, kind)
            result = session.execute(
                delete(ListMembership).where(
                    ListMembership.list_id == list_id,
                    ListMembership.list_member == target,
                )
            )
            if not result.rowcount:
                raise NotMember(f"{target} is not in the {kind.value} list")

        logger.info("%s removed %s from %s list", actor, target, kind.value)

    def list_members(
        self, actor: str, kind: ListKind, *, timeout: float | None = None
    ) -> list[ListMemberOut]:
        """Return members of the actor's list with their status text, ordered by login."""
        with self.store.transaction(timeout) as session:
            list_id = self._owned_list_id(session, actor, kind)
            rows = session.execute(
                select(User.login, User.status)
                .join(ListMembership, ListMembership.list_member == User.login)
                .where(ListMembership.list_id == list_id)
                .order_by(User.login)
            ).all()
        return [ListMemberOut(login=row.login, status=row.status) for row in rows]

    def is_listed(
        self, actor: str, kind: ListKind, target: str, *, timeout: float | None = None
    ) -> bool:
        """Return True if ``target`` is on the actor's list of ``kind``."""
        with self.store.transaction(timeout) as session:
            list_id = self._owned_list_id(session, actor, kind)
            return self._is_listed(session, list_id, target)

    def _owned_list_id(self, session: Session, login: str, kind: ListKind) -> int:
        user = session.get(User, login)
        if user is None:
            raise UnknownUser(f"User {login!r} does not exist")
        return user.list_id(kind)

    def _lock_owned_list(self, session: Session, login: str, kind: ListKind) -> int:
        """Return the owned list id after locking its row for the transaction."""
        list_id = self._owned_list_id(session, login, kind)
        session.execute(select(UserList.id).where(UserList.id == list_id).with_for_update())
        return list_id

    @staticmethod
    def _is_listed(session: Session, list_id: int, target: str) -> bool:
        return session.get(ListMembership, (list_id, target)) is not None
