"""Paste data models"""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a stored ISO timestamp; unparseable or missing values sort oldest"""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Paste(BaseModel):
    """
    A stored snippet.

    ``id`` is assigned by the document store and is not part of the stored
    document; everything else maps 1:1 onto the document's camelCase keys.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    content: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    user_id: Optional[str] = Field(default=None, alias="userId")
    username: Optional[str] = None

    @classmethod
    def from_document(cls, paste_id: str, document: dict) -> "Paste":
        data = dict(document or {})
        data.pop("id", None)
        data.setdefault("content", "")
        return cls(id=paste_id, **data)

    def to_document(self) -> dict:
        """Stored shape: {content, createdAt, updatedAt?, userId, username}"""
        document = self.model_dump(by_alias=True, exclude={"id"})
        if document.get("updatedAt") is None:
            document.pop("updatedAt", None)
        return document


class PasteListing(BaseModel):
    """Best-effort enumeration result; ``skipped`` counts unreadable documents"""

    pastes: List[Paste] = Field(default_factory=list)
    skipped: int = 0
