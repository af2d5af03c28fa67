"""Chat lifecycle: creation, membership changes, type transitions and cascades.

A chat is created ``private`` with its initiator as the only member. Its type
afterwards follows membership size:

* adding a member that brings the chat above two members forces ``group``;
  adds never turn a chat back to ``private``;
* removing a member that leaves exactly two members sets ``private``;
* removing a member that leaves one member deletes the chat together with
  its memberships and messages.

Only the initiator may add or remove members or delete the chat. Founding
members added while the chat is being created skip that check: the creator
is implicitly authorized during creation.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.core.errors import (
    AlreadyMember,
    NotAMember,
    NotAuthorized,
    NotMember,
    SelfReference,
    UnknownChat,
    UnknownUser,
)
from messenger.core.settings import Settings, settings
from messenger.db.store import Store
from messenger.models import Chat, ChatMembership, ChatType, Message, User
from messenger.schemas.chat import ChatSummary, MessageOut, MessagePage
from messenger.schemas.common import Confirmation
from messenger.services.ledger import MessageLedger

logger = logging.getLogger(__name__)

__all__ = ["ChatDraft", "ChatService", "RemovalOutcome"]

# A chat holding more members than this is a group chat.
PRIVATE_CHAT_MAX_MEMBERS = 2


class RemovalOutcome(str, enum.Enum):
    """What happened to a chat after a member was removed."""

    MEMBER_REMOVED = "removed"
    CHAT_PRIVATE = "collapsed_to_private"
    CHAT_DELETED = "chat_deleted"


@dataclass
class ChatDraft:
    """Chat under construction by the creation wizard.

    Founding members are committed one at a time. A draft that is abandoned
    before ``finish_chat`` keeps whatever members were already added and has
    no welcome message; nothing is rolled back.
    """

    chat_id: int
    initiator: str
    added: int = 0


class ChatService:
    """Service handling chat membership and lifecycle transitions."""

    def __init__(
        self,
        store: Store,
        *,
        ledger: MessageLedger | None = None,
        app_settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.ledger = ledger or MessageLedger()
        self.settings = app_settings or settings

    # Creation

    def create_chat(
        self, initiator: str, initial_members: Iterable[str], *, timeout: float | None = None
    ) -> int:
        """Create a chat, add founding members and post the welcome message.

        Invalid candidates (unknown, the initiator, duplicates) are skipped.

        Args:
            initiator: Login of the creating user.
            initial_members: Candidate logins in the order they were entered.
            timeout: Optional per-transaction store timeout in seconds.

        Returns:
            The new chat id.
        """
        draft = self.start_chat(initiator, timeout=timeout)
        for candidate in initial_members:
            try:
                self.add_founding_member(draft, candidate, timeout=timeout)
            except (UnknownUser, SelfReference, AlreadyMember) as exc:
                logger.info(
                    "Skipping founding member %r of chat %s: %s",
                    candidate,
                    draft.chat_id,
                    exc.code,
                )
        return self.finish_chat(draft, timeout=timeout)

    def start_chat(self, initiator: str, *, timeout: float | None = None) -> ChatDraft:
        """Allocate a private chat whose only member is ``initiator``.

        Raises:
            UnknownUser: If the initiator is not registered.
        """
        with self.store.transaction(timeout) as session:
            if session.get(User, initiator) is None:
                raise UnknownUser(f"User {initiator!r} does not exist")
            chat = Chat(chat_type=ChatType.PRIVATE, init_sender=initiator)
            session.add(chat)
            session.flush()
            session.add(ChatMembership(chat_id=chat.chat_id, member=initiator))
            session.flush()
            chat_id = chat.chat_id

        logger.info("Chat %s started by %s", chat_id, initiator)
        return ChatDraft(chat_id=chat_id, initiator=initiator)

    def add_founding_member(
        self, draft: ChatDraft, candidate: str, *, timeout: float | None = None
    ) -> None:
        """Add a founding member on behalf of the initiator.

        The initiator check of ``add_member`` is deliberately absent here.

        Raises:
            UnknownChat: If the draft's chat no longer exists.
            UnknownUser: If the candidate is not registered.
            SelfReference: If the candidate is the initiator.
            AlreadyMember: If the candidate was already added.
        """
        with self.store.transaction(timeout) as session:
            chat = self._lock_chat(session, draft.chat_id)
            self._insert_member(session, chat, draft.initiator, candidate)
        draft.added += 1

    def finish_chat(self, draft: ChatDraft, *, timeout: float | None = None) -> int:
        """Settle the chat type from the founding adds and post the welcome message."""
        with self.store.transaction(timeout) as session:
            chat = self._lock_chat(session, draft.chat_id)
            # Two or more founding members besides the initiator make a group.
            if draft.added >= PRIVATE_CHAT_MAX_MEMBERS:
                chat.chat_type = ChatType.GROUP
            self.ledger.append(session, chat.chat_id, draft.initiator, self.settings.welcome_message)
            chat_type = chat.chat_type

        logger.info(
            "Chat %s created by %s as %s with %d founding member(s)",
            draft.chat_id,
            draft.initiator,
            chat_type.value,
            draft.added,
        )
        return draft.chat_id

    # Membership edits

    def add_member(
        self, actor: str, chat_id: int, candidate: str, *, timeout: float | None = None
    ) -> None:
        """Add ``candidate`` to an existing chat.

        Raises:
            UnknownChat: If the chat does not exist.
            NotAuthorized: If the actor is not the initiator.
            UnknownUser: If the candidate is not registered.
            SelfReference: If the candidate is the actor.
            AlreadyMember: If the candidate is already a member.
        """
        with self.store.transaction(timeout) as session:
            chat = self._lock_chat(session, chat_id)
            self._require_initiator(chat, actor)
            self._insert_member(session, chat, actor, candidate)
            if self._member_count(session, chat_id) > PRIVATE_CHAT_MAX_MEMBERS:
                if chat.chat_type is not ChatType.GROUP:
                    logger.info("Chat %s became a group chat", chat_id)
                chat.chat_type = ChatType.GROUP

        logger.info("%s added %s to chat %s", actor, candidate, chat_id)

    def remove_member(
        self, actor: str, chat_id: int, target: str, *, timeout: float | None = None
    ) -> RemovalOutcome:
        """Remove ``target`` from a chat and apply the resulting type transition.

        Raises:
            UnknownChat: If the chat does not exist.
            NotAuthorized: If the actor is not the initiator.
            SelfReference: If the initiator tries to remove themself.
            NotMember: If the target is not a member.
        """
        with self.store.transaction(timeout) as session:
            chat = self._lock_chat(session, chat_id)
            self._require_initiator(chat, actor)
            if target == actor:
                raise SelfReference("The initiator cannot remove themself from the chat")

            result = session.execute(
                delete(ChatMembership).where(
                    ChatMembership.chat_id == chat_id,
                    ChatMembership.member == target,
                )
            )
            if not result.rowcount:
                raise NotMember(f"{target} is not a member of chat {chat_id}")

            remaining = self._member_count(session, chat_id)
            if remaining <= 1:
                self._cascade_delete(session, chat_id)
                outcome = RemovalOutcome.CHAT_DELETED
            elif remaining == PRIVATE_CHAT_MAX_MEMBERS:
                chat.chat_type = ChatType.PRIVATE
                outcome = RemovalOutcome.CHAT_PRIVATE
            else:
                outcome = RemovalOutcome.MEMBER_REMOVED

        logger.info("%s removed %s from chat %s: %s", actor, target, chat_id, outcome.value)
        return outcome

    def delete_chat(
        self,
        actor: str,
        chat_id: int,
        confirmation: Confirmation,
        *,
        timeout: float | None = None,
    ) -> bool:
        """Delete a chat with its memberships and messages once confirmed.

        Returns:
            True if the chat was deleted, False if the caller declined.

        Raises:
            UnknownChat: If the chat does not exist.
            NotAuthorized: If the actor is not the initiator.
        """
        with self.store.transaction(timeout) as session:
            chat = self._lock_chat(session, chat_id)
            self._require_initiator(chat, actor)
            if not confirmation.confirmed:
                return False
            self._cascade_delete(session, chat_id)

        logger.info("Chat %s deleted by %s", chat_id, actor)
        return True

    # Messages

    def append_message(
        self, actor: str, chat_id: int, text: str, *, timeout: float | None = None
    ) -> MessageOut:
        """Append a message from a current member.

        Raises:
            UnknownChat: If the chat does not exist.
            NotAMember: If the actor is not a member of the chat.
        """
        with self.store.transaction(timeout) as session:
            self._lock_chat(session, chat_id)
            if not self._is_member(session, chat_id, actor):
                raise NotAMember(f"{actor} is not a member of chat {chat_id}")
            message = self.ledger.append(session, chat_id, actor, text)
            return MessageOut.model_validate(message)

    def view_messages(
        self, user: str, chat_id: int, *, timeout: float | None = None
    ) -> list[MessageOut]:
        """Return every message of a chat, oldest first."""
        with self.store.transaction(timeout) as session:
            self._require_viewer(session, chat_id, user)
            messages = self.ledger.list_by_chat(session, chat_id)
            return [MessageOut.model_validate(message) for message in messages]

    def view_message_page(
        self, user: str, chat_id: int, page: int = 0, *, timeout: float | None = None
    ) -> MessagePage:
        """Return one window of a chat counted back from the newest message.

        Page 0 holds the newest ``message_page_size`` messages, page 1 the
        ones before them, and so on. Messages inside a page are oldest first.
        """
        if page < 0:
            raise ValueError("page must be non-negative")
        size = self.settings.message_page_size

        with self.store.transaction(timeout) as session:
            self._require_viewer(session, chat_id, user)
            total = self.ledger.count(session, chat_id)
            end = total - page * size
            if end <= 0:
                return MessagePage(
                    chat_id=chat_id, page=page, total=total, messages=[], end_of_messages=True
                )
            start = max(0, end - size)
            messages = self.ledger.list_by_chat(session, chat_id, offset=start, limit=end - start)
            return MessagePage(
                chat_id=chat_id,
                page=page,
                total=total,
                messages=[MessageOut.model_validate(message) for message in messages],
                end_of_messages=start == 0,
            )

    # Queries

    def list_visible_chats(self, user: str, *, timeout: float | None = None) -> list[ChatSummary]:
        """Return the user's chats ordered by their latest message, oldest activity first.

        Chats without any message sort before the rest. They are listed rather
        than hidden so that a chat left behind by an unfinished creation wizard
        stays visible to its members; an inner join on messages would drop it.
        """
        last_message = (
            select(
                Message.chat_id.label("chat_id"),
                func.max(Message.msg_timestamp).label("last_message_at"),
            )
            .group_by(Message.chat_id)
            .subquery()
        )
        stmt = (
            select(Chat, last_message.c.last_message_at)
            .join(ChatMembership, ChatMembership.chat_id == Chat.chat_id)
            .outerjoin(last_message, last_message.c.chat_id == Chat.chat_id)
            .where(ChatMembership.member == user)
            .order_by(
                last_message.c.last_message_at.is_(None).desc(),
                last_message.c.last_message_at.asc(),
                Chat.chat_id.asc(),
            )
        )
        with self.store.transaction(timeout) as session:
            rows = session.execute(stmt).all()
            return [
                ChatSummary(
                    chat_id=chat.chat_id,
                    chat_type=chat.chat_type,
                    init_sender=chat.init_sender,
                    last_message_at=last_message_at,
                )
                for chat, last_message_at in rows
            ]

    def get_chat(self, user: str, chat_id: int, *, timeout: float | None = None) -> ChatSummary:
        """Return a single chat for one of its members."""
        with self.store.transaction(timeout) as session:
            chat = self._require_viewer(session, chat_id, user)
            return ChatSummary(
                chat_id=chat.chat_id,
                chat_type=chat.chat_type,
                init_sender=chat.init_sender,
                last_message_at=self.ledger.last_timestamp(session, chat_id),
            )

    def list_chat_members(
        self, user: str, chat_id: int, *, timeout: float | None = None
    ) -> list[str]:
        """Return the logins of a chat's members, ordered by login."""
        with self.store.transaction(timeout) as session:
            self._require_viewer(session, chat_id, user)
            return list(
                session.execute(
                    select(ChatMembership.member)
                    .where(ChatMembership.chat_id == chat_id)
                    .order_by(ChatMembership.member)
                ).scalars()
            )

    # Helpers

    def _lock_chat(self, session: Session, chat_id: int) -> Chat:
        chat = session.execute(
            select(Chat).where(Chat.chat_id == chat_id).with_for_update()
        ).scalar_one_or_none()
        if chat is None:
            raise UnknownChat(f"Chat {chat_id} does not exist")
        return chat

    def _require_viewer(self, session: Session, chat_id: int, user: str) -> Chat:
        chat = session.get(Chat, chat_id)
        if chat is None:
            raise UnknownChat(f"Chat {chat_id} does not exist")
        if not self._is_member(session, chat_id, user):
            raise NotAuthorized(f"Chat {chat_id} cannot be viewed by {user}")
        return chat

    @staticmethod
    def _require_initiator(chat: Chat, actor: str) -> None:
        if chat.init_sender != actor:
            raise NotAuthorized(f"Only the initiator of chat {chat.chat_id} may edit it")

    def _insert_member(self, session: Session, chat: Chat, actor: str, candidate: str) -> None:
        """Validate and insert a membership row; the chat row must already be locked."""
        # A failed flush expires the chat, so its id is read up front.
        chat_id = chat.chat_id
        if session.get(User, candidate) is None:
            raise UnknownUser(f"User {candidate!r} does not exist")
        if candidate == actor:
            raise SelfReference("Cannot add yourself to the chat")
        if self._is_member(session, chat_id, candidate):
            raise AlreadyMember(f"{candidate} is already in chat {chat_id}")

        session.add(ChatMembership(chat_id=chat_id, member=candidate))
        try:
            session.flush()
        except IntegrityError as exc:
            raise AlreadyMember(f"{candidate} is already in chat {chat_id}") from exc

    @staticmethod
    def _is_member(session: Session, chat_id: int, login: str) -> bool:
        return session.get(ChatMembership, (chat_id, login)) is not None

    @staticmethod
    def _member_count(session: Session, chat_id: int) -> int:
        return session.execute(
            select(func.count()).select_from(ChatMembership).where(ChatMembership.chat_id == chat_id)
        ).scalar() or 0

    def _cascade_delete(self, session: Session, chat_id: int) -> None:
        """Delete memberships, messages and the chat row, children first."""
        session.execute(delete(ChatMembership).where(ChatMembership.chat_id == chat_id))
        purged = self.ledger.purge(session, chat_id)
        session.execute(delete(Chat).where(Chat.chat_id == chat_id))
        logger.info("Chat %s cascade-deleted with %d message(s)", chat_id, purged)

