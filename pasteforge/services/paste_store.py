"""
Paste storage: one document per paste inside a shared collection.

Ownership checks are fetch-then-compare and are not atomic with the write
that follows; concurrent edits are last-write-wins. A paste created without
a session has a null owner, so no identity can ever edit or delete it.
"""

from typing import Optional

from pydantic import ValidationError as SchemaError

from ..api.jsonbin_client import DocumentStoreClient
from ..models.paste import Paste, PasteListing, parse_timestamp, utc_now_iso
from ..models.user import Identity
from ..utils.exceptions import (
    AuthenticationRequired,
    AuthorizationDenied,
    NotFoundError,
    PasteForgeError,
    ValidationError,
)
from ..utils.logger import get_logger
from .user_store import UserRepository

logger = get_logger(__name__)


def _clean_content(content: Optional[str]) -> str:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Content is required")
    return content.strip()


class PasteRepository:
    """Paste CRUD and per-owner listings"""

    def __init__(
        self,
        client: DocumentStoreClient,
        collection_id: str,
        users: UserRepository,
    ):
        self.client = client
        self.collection_id = collection_id
        self.users = users

    def create_paste(self, content: Optional[str], identity: Optional[Identity] = None) -> str:
        """Store a new paste and return its id. Blank content never reaches the store."""
        paste = Paste(
            content=_clean_content(content),
            created_at=utc_now_iso(),
            user_id=identity.user_id if identity else None,
            username=identity.username if identity else None,
        )
        paste_id = self.client.create(paste.to_document(), self.collection_id)
        logger.info("Paste created", paste_id=paste_id, owner=paste.username)
        return paste_id

    def get_paste(self, paste_id: str) -> Paste:
        try:
            document = self.client.read(paste_id)
        except NotFoundError:
            raise NotFoundError("Paste not found")
        if not isinstance(document, dict):
            raise NotFoundError("Paste not found")
        return Paste.from_document(paste_id, document)

    def _get_owned(self, paste_id: str, identity: Identity, action: str) -> Paste:
        existing = self.get_paste(paste_id)
        if existing.user_id != identity.user_id:
            logger.warning(
                "Ownership check failed",
                paste_id=paste_id,
                action=action,
                user_id=identity.user_id,
            )
            raise AuthorizationDenied(f"You can only {action} your own pastes")
        return existing

    def update_paste(self, paste_id: str, content: Optional[str], identity: Optional[Identity]) -> Paste:
        if identity is None:
            raise AuthenticationRequired("Authentication required")
        cleaned = _clean_content(content)

        existing = self._get_owned(paste_id, identity, "edit")
        updated = existing.model_copy(update={"content": cleaned, "updated_at": utc_now_iso()})
        self.client.replace(paste_id, updated.to_document())

        logger.info("Paste updated", paste_id=paste_id, user_id=identity.user_id)
        return updated

    def delete_paste(self, paste_id: str, identity: Optional[Identity]) -> None:
        if identity is None:
            raise AuthenticationRequired("Authentication required")

        self._get_owned(paste_id, identity, "delete")
        self.client.delete(paste_id)
        logger.info("Paste deleted", paste_id=paste_id, user_id=identity.user_id)

    def _scan_collection(self, user_id: str) -> PasteListing:
        """
        Fetch every document in the collection and keep those owned by
        ``user_id``, newest first.

        Best-effort: a document that cannot be fetched or parsed is skipped
        and counted, never escalated. Failure to list the collection itself
        still propagates.
        """
        listing = PasteListing()
        for doc_id in self.client.list_collection(self.collection_id):
            try:
                paste = self.get_paste(doc_id)
            except (PasteForgeError, SchemaError) as e:
                logger.warning("Skipping unreadable paste", paste_id=doc_id, error=str(e))
                listing.skipped += 1
                continue
            if paste.user_id == user_id:
                listing.pastes.append(paste)

        listing.pastes.sort(key=lambda p: parse_timestamp(p.created_at), reverse=True)
        return listing

    def list_pastes_by_user(self, user_id: str) -> PasteListing:
        """Pastes owned by a session's user (dashboard view)"""
        return self._scan_collection(user_id)

    def list_pastes_by_username(self, username: str) -> PasteListing:
        """Pastes of a public profile; unknown usernames raise NotFoundError"""
        user = self.users.find_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return self._scan_collection(user.id)
