# src/messenger/schemas/user.py
"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserOut(BaseModel):
    """Public view of a registered user; never carries the credential."""

    login: str
    phone_num: str | None = None
    status: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ListMemberOut(BaseModel):
    """Entry of a contact or block list with the member's current status."""

    login: str = Field(..., description="Login of the listed user")
    status: str | None = Field(None, description="Member's current status text")
