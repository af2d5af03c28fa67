# src/messenger/schemas/chat.py
"""Chat and message Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from messenger.db.time import as_utc
from messenger.models.chat import ChatType


class ChatSummary(BaseModel):
    """Chat visible to a member, annotated with its latest activity."""

    chat_id: int
    chat_type: ChatType
    init_sender: str
    last_message_at: datetime | None = None

    @field_validator("last_message_at")
    @classmethod
    def normalize_last_message_at(cls, value: datetime | None) -> datetime | None:
        """Report timestamps as aware UTC values."""
        if value is None:
            return None
        return as_utc(value)


class MessageOut(BaseModel):
    """Schema for a single chat message."""

    msg_id: int
    chat_id: int
    sender_login: str
    msg_text: str
    msg_timestamp: datetime

    @field_validator("msg_timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        """Report timestamps as aware UTC values."""
        return as_utc(value)

    model_config = ConfigDict(from_attributes=True)


class MessagePage(BaseModel):
    """One reverse-chronological window of a chat, listed oldest first."""

    chat_id: int
    page: int = Field(..., ge=0, description="0 is the newest window")
    total: int = Field(..., ge=0, description="Messages in the whole chat")
    messages: list[MessageOut]
    end_of_messages: bool = Field(
        ..., description="True once the window reaches the earliest message"
    )
