"""Application container: builds every service once from explicit settings"""

from typing import Optional

from .api.jsonbin_client import DocumentStoreClient
from .auth.session import SessionResolver
from .auth.tokens import TokenCodec
from .services.paste_store import PasteRepository
from .services.user_store import UserRepository
from .utils.config import Settings
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class PasteForgeApp:
    """Owns the store client, token codec and repositories for one process"""

    def __init__(self, settings: Settings, client: Optional[DocumentStoreClient] = None):
        self.settings = settings

        setup_logger(
            log_level=settings.logging.level,
            log_format=settings.logging.format,
            file_path=settings.logging.file_path,
            max_bytes=settings.logging.max_bytes,
            backup_count=settings.logging.backup_count,
        )

        self.client = client or DocumentStoreClient(settings.store)
        self.codec = TokenCodec.from_settings(settings.auth)
        self.sessions = SessionResolver(self.codec, cookie_name=settings.auth.cookie_name)
        self.users = UserRepository(
            self.client,
            users_document_id=settings.store.users_document_id,
            min_password_length=settings.auth.min_password_length,
            hash_passwords=settings.auth.hash_passwords,
        )
        self.pastes = PasteRepository(
            self.client,
            collection_id=settings.store.pastes_collection_id,
            users=self.users,
        )

        logger.info(
            "PasteForge initialized",
            app_name=settings.app.name,
            version=settings.app.version,
            environment=settings.app.environment,
            store=settings.store.base_url,
        )

    @property
    def session_max_age(self) -> int:
        """Session cookie lifetime in seconds"""
        return self.settings.auth.session_days * 24 * 60 * 60

    def close(self) -> None:
        self.client.close()
