"""User data models for authentication and public profiles"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """
    One element of the ``users`` array in the shared users document.

    Unknown keys are kept so a whole-array rewrite never drops fields
    written by other clients.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    username: str
    password: str
    name: Optional[str] = None
    description: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_public(self) -> "PublicProfile":
        return PublicProfile(
            id=self.id,
            username=self.username,
            name=self.name or self.username,
            description=self.description or "",
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PublicProfile(BaseModel):
    """Profile fields safe to show to anyone; never carries the password"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    username: str
    name: str
    description: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class Identity(BaseModel):
    """The {userId, username} pair recovered from a verified session token"""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
