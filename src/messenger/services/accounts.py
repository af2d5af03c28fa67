"""Registration, credential checks, status updates and account deletion."""
from __future__ import annotations

import enum
import logging

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.core import security
from messenger.core.errors import AlreadyRegistered, StillReferenced, UnknownUser
from messenger.db.store import Store
from messenger.models import ListKind, ListMembership, User, UserList
from messenger.schemas.common import Confirmation
from messenger.schemas.user import UserOut

logger = logging.getLogger(__name__)

__all__ = ["AccountDeletion", "AccountService"]


class AccountDeletion(str, enum.Enum):
    """Result of an account deletion request."""

    DELETED = "deleted"
    SOFT_DISABLED = "soft_disabled"
    REJECTED = "rejected"


class AccountService:
    """CRUD-style helpers for managing user accounts."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def register(
        self,
        login: str,
        credential: str,
        *,
        phone_num: str | None = None,
        status: str | None = None,
        timeout: float | None = None,
    ) -> UserOut:
        """Create a user together with an empty block list and contact list.

        Raises:
            AlreadyRegistered: If the login or phone number is in use.
        """
        with self.store.transaction(timeout) as session:
            if session.get(User, login) is not None:
                raise AlreadyRegistered(f"Login {login!r} is already in use")

            block_list = UserList(list_type=ListKind.BLOCK)
            contact_list = UserList(list_type=ListKind.CONTACT)
            session.add_all([block_list, contact_list])
            session.flush()

            user = User(
                login=login,
                phone_num=phone_num,
                credential=security.hash_key(credential),
                status=status,
                contact_list_id=contact_list.id,
                block_list_id=block_list.id,
            )
            session.add(user)
            try:
                session.flush()
            except IntegrityError as exc:
                raise AlreadyRegistered("Login or phone number is already in use") from exc
            result = UserOut.model_validate(user)

        logger.info("Registered user %s", login)
        return result

    def authenticate(self, login: str, credential: str, *, timeout: float | None = None) -> bool:
        """Return True if ``credential`` matches the stored one for ``login``."""
        with self.store.transaction(timeout) as session:
            user = session.get(User, login)
            return user is not None and security.verify_credential(credential, user.credential)

    def get_user(self, login: str, *, timeout: float | None = None) -> UserOut:
        """Return a single user by login."""
        with self.store.transaction(timeout) as session:
            return UserOut.model_validate(self._get_existing(session, login))

    def update_status(
        self,
        login: str,
        status: str,
        confirmation: Confirmation = Confirmation.YES,
        *,
        timeout: float | None = None,
    ) -> bool:
        """Replace the user's status text when confirmed.

        Returns:
            True if the status was updated, False if the caller cancelled.
        """
        with self.store.transaction(timeout) as session:
            user = self._get_existing(session, login)
            if not confirmation.confirmed:
                return False
            user.status = status
        return True

    def delete_account(
        self,
        login: str,
        credential: str,
        soft_disable: Confirmation = Confirmation.NO,
        *,
        timeout: float | None = None,
    ) -> AccountDeletion:
        """Delete an account, falling back to disabling its credential.

        A hard delete removes the user's own list entries, the user row and
        the user's two lists. When other rows still reference the user
        (chats, chat memberships, messages, other users' lists) the store
        rejects it; with ``soft_disable`` confirmed the credential is then
        overwritten so the account can never log in again while every
        referencing row stays intact.

        Raises:
            StillReferenced: If the hard delete conflicts and soft-disable was declined.
        """
        try:
            with self.store.transaction(timeout) as session:
                user = session.get(User, login)
                if user is None or not security.verify_credential(credential, user.credential):
                    logger.info("Rejected account deletion for %s", login)
                    return AccountDeletion.REJECTED
                self._hard_delete(session, user)
        except IntegrityError as exc:
            logger.info("Account %s is still referenced: %s", login, exc.orig)
        else:
            logger.info("Deleted account %s", login)
            return AccountDeletion.DELETED

        if not soft_disable.confirmed:
            raise StillReferenced(f"Account {login!r} is still linked to chats or lists")

        with self.store.transaction(timeout) as session:
            user = self._get_existing(session, login)
            user.credential = security.DISABLED_CREDENTIAL

        logger.info("Soft-disabled account %s", login)
        return AccountDeletion.SOFT_DISABLED

    @staticmethod
    def _get_existing(session: Session, login: str) -> User:
        user = session.get(User, login)
        if user is None:
            raise UnknownUser(f"User {login!r} does not exist")
        return user

    @staticmethod
    def _hard_delete(session: Session, user: User) -> None:
        """Delete the user and owned lists; foreign keys elsewhere make this fail."""
        owned = user.owned_list_ids
        session.execute(delete(ListMembership).where(ListMembership.list_id.in_(owned)))
        session.execute(delete(User).where(User.login == user.login))
        session.execute(delete(UserList).where(UserList.id.in_(owned)))
