"""
User storage backed by a single shared document in the document store.

The document holds ``{"users": [UserRecord, ...]}``. Every operation is a
whole-array read-modify-write with no locking and no concurrency token:
two registrations interleaved between read and write can both succeed,
and the later write wins. A users document that does not exist yet reads
as empty. Entries that fail validation are skipped on read and written
back untouched.
"""

import time
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import ValidationError as SchemaError

from ..api.jsonbin_client import DocumentStoreClient
from ..auth.passwords import check_password, encode_for_storage
from ..models.paste import utc_now_iso
from ..models.user import Identity, PublicProfile, UserRecord
from ..utils.exceptions import (
    AuthenticationRequired,
    ConflictError,
    InvalidCredentials,
    NotFoundError,
    StoreError,
    ValidationError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def generate_user_id() -> str:
    """Millisecond creation timestamp, as a string"""
    return str(int(time.time() * 1000))


class UserRepository:
    """User CRUD over the shared users document"""

    def __init__(
        self,
        client: DocumentStoreClient,
        users_document_id: str,
        min_password_length: int = 6,
        hash_passwords: bool = False,
    ):
        self.client = client
        self.users_document_id = users_document_id
        self.min_password_length = min_password_length
        self.hash_passwords = hash_passwords

    def _read_entries(self) -> List[Any]:
        """Raw ``users`` array; a users document that does not exist yet is empty"""
        try:
            record = self.client.read(self.users_document_id)
        except NotFoundError:
            logger.warning("Users document missing, treating as empty", document_id=self.users_document_id)
            return []
        if not isinstance(record, dict):
            raise StoreError("Users document is malformed: expected an object")
        raw_users = record.get("users") or []
        if not isinstance(raw_users, list):
            raise StoreError("Users document is malformed: users is not a list")
        return raw_users

    def _parse_entries(self, raw_users: List[Any]) -> Tuple[List[UserRecord], List[Any]]:
        """Split raw entries into valid records and entries that fail validation"""
        users = []
        unreadable = []
        for i, item in enumerate(raw_users):
            try:
                users.append(UserRecord(**item))
            except (SchemaError, TypeError) as e:
                entry_id = item.get("id") if isinstance(item, dict) else None
                logger.warning(
                    "Skipping invalid user entry",
                    entry_id=entry_id or f"index_{i}",
                    error=str(e),
                )
                unreadable.append(item)
        return users, unreadable

    def load_users(self) -> List[UserRecord]:
        """Load all valid users from the store. Invalid entries are skipped."""
        users, _ = self._parse_entries(self._read_entries())
        return users

    def save_users(self, users: List[UserRecord], unreadable: Sequence[Any] = ()) -> None:
        """Write the whole users array back, keeping entries that could not be parsed"""
        self.client.replace(
            self.users_document_id,
            {"users": [user.to_document() for user in users] + list(unreadable)},
        )

    def find_by_username(self, username: str) -> Optional[UserRecord]:
        """Find user by username (case-sensitive exact match)"""
        for user in self.load_users():
            if user.username == username:
                return user
        return None

    def register(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        """
        Create a new user.

        Raises:
            ValidationError: Missing username/password or password too short
            ConflictError: Username already taken; the store is not written
        """
        if not username or not password:
            raise ValidationError("Username and password required")
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

        users, unreadable = self._parse_entries(self._read_entries())

        taken = {u.username for u in users}
        taken.update(item.get("username") for item in unreadable if isinstance(item, dict))
        if username in taken:
            logger.info("Registration rejected, username taken", username=username)
            raise ConflictError("Username already exists")

        new_user = UserRecord(
            id=generate_user_id(),
            username=username,
            password=encode_for_storage(password, self.hash_passwords),
            name=username,
            description="",
            created_at=utc_now_iso(),
        )
        users.append(new_user)
        self.save_users(users, unreadable)

        logger.info("User registered", user_id=new_user.id, username=username)
        return new_user

    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        """
        Return the user whose username and password both match.

        Unknown usernames and wrong passwords raise the same error.
        """
        if not username or not password:
            raise ValidationError("Username and password required")

        for user in self.load_users():
            if user.username == username and check_password(password, user.password):
                return user

        logger.info("Login rejected", username=username)
        raise InvalidCredentials("Invalid credentials")

    def get_by_username(self, username: str) -> PublicProfile:
        user = self.find_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user.to_public()

    def update_profile(
        self,
        username: str,
        name: Optional[str],
        description: Optional[str],
        identity: Optional[Identity],
    ) -> PublicProfile:
        """
        Update display name and description.

        Only the session whose username equals ``username`` may do this.
        """
        if identity is None or identity.username != username:
            raise AuthenticationRequired("Unauthorized")

        if not name or not name.strip():
            raise ValidationError("Name is required")

        users, unreadable = self._parse_entries(self._read_entries())
        for i, user in enumerate(users):
            if user.username == username:
                updated = user.model_copy(
                    update={
                        "name": name.strip(),
                        "description": (description or "").strip(),
                        "updated_at": utc_now_iso(),
                    }
                )
                users[i] = updated
                self.save_users(users, unreadable)
                logger.info("Profile updated", username=username)
                return updated.to_public()

        raise NotFoundError("User not found")
