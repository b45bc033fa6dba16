"""API request/response models"""

from typing import List, Optional
from pydantic import BaseModel, Field


# Request bodies: every field is optional so a missing field becomes a 400
# with a specific message instead of a schema error.

class CredentialsRequest(BaseModel):
    """Login / registration body"""
    username: Optional[str] = None
    password: Optional[str] = None


class PasteContentRequest(BaseModel):
    content: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    username: str


class AuthResponse(BaseModel):
    user: UserSummary


class CreatePasteResponse(BaseModel):
    pasteId: str


class PasteBody(BaseModel):
    """Paste as returned to clients (camelCase, like the stored document)"""
    id: str
    content: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    userId: Optional[str] = None
    username: Optional[str] = None


class PasteResponse(BaseModel):
    paste: PasteBody


class PasteListResponse(BaseModel):
    pastes: List[PasteBody] = Field(default_factory=list)
    skipped: int = 0


class ProfileBody(BaseModel):
    id: str
    username: str
    name: str
    description: str = ""
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProfileResponse(BaseModel):
    profile: ProfileBody


class SuccessResponse(BaseModel):
    success: bool = True
