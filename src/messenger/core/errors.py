"""Typed failures raised by the messenger engines.

Every engine operation either returns a result or raises one of these.
Validation errors are raised before any mutation is flushed, so the caller
can re-prompt without cleanup. ``StoreUnavailable`` wraps collaborator
failures; the transaction it interrupted has already been rolled back.
"""

from __future__ import annotations


class MessengerError(RuntimeError):
    """Base exception for recoverable engine failures.

    Attributes:
        code: Stable machine-readable identifier for the failure kind.
    """

    code = "messenger_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class UnknownUser(MessengerError):
    """Raised when a login does not belong to any registered user."""

    code = "unknown_user"


class UnknownChat(MessengerError):
    """Raised when a chat id does not exist."""

    code = "unknown_chat"


class SelfReference(MessengerError):
    """Raised when a user targets themself where that is not allowed."""

    code = "self_reference"


class AlreadyMember(MessengerError):
    """Raised when the target already belongs to the list or chat."""

    code = "already_member"


class NotMember(MessengerError):
    """Raised when the target is not in the list or chat being edited."""

    code = "not_member"


class NotAuthorized(MessengerError):
    """Raised when the actor may not perform the operation on a chat."""

    code = "not_authorized"


class NotAMember(MessengerError):
    """Raised when a non-member tries to post into a chat."""

    code = "not_a_member"


class StillReferenced(MessengerError):
    """Raised when an account cannot be hard-deleted and soft-disable was declined."""

    code = "still_referenced"


class AlreadyRegistered(MessengerError):
    """Raised when a login or phone number is already taken."""

    code = "already_registered"


class StoreUnavailable(MessengerError):
    """Raised when the record store fails or times out."""

    code = "store_unavailable"
