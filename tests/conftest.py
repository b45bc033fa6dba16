"""Shared fixtures: an in-memory document store behind the real services."""

import copy
from collections import defaultdict

import pytest
from fastapi.testclient import TestClient

from pasteforge.api.jsonbin_client import DocumentStoreClient
from pasteforge.app import PasteForgeApp
from pasteforge.utils.config import AuthSettings, LoggingSettings, Settings, StoreSettings
from pasteforge.utils.exceptions import NotFoundError, StoreError


USERS_DOC = "users-doc"
PASTES_COLLECTION = "pastes-collection"


class InMemoryDocumentStore(DocumentStoreClient):
    """Document store stand-in that keeps everything in dicts"""

    def __init__(self, settings: StoreSettings):
        super().__init__(settings)
        self.documents = {}
        self.collections = defaultdict(list)
        self.failing_reads = set()
        self.writes = 0
        self._counter = 0

    def read(self, doc_id):
        if doc_id in self.failing_reads:
            raise StoreError("Document store returned HTTP 500", http_status=500)
        if doc_id not in self.documents:
            raise NotFoundError(f"Document not found: b/{doc_id}")
        return copy.deepcopy(self.documents[doc_id])

    def replace(self, doc_id, document):
        self.writes += 1
        self.documents[doc_id] = copy.deepcopy(document)

    def create(self, document, collection_id):
        self.writes += 1
        self._counter += 1
        doc_id = f"paste{self._counter:04d}"
        self.documents[doc_id] = copy.deepcopy(document)
        self.collections[collection_id].append(doc_id)
        return doc_id

    def delete(self, doc_id):
        if doc_id not in self.documents:
            raise NotFoundError(f"Document not found: b/{doc_id}")
        self.writes += 1
        del self.documents[doc_id]
        for ids in self.collections.values():
            if doc_id in ids:
                ids.remove(doc_id)

    def list_collection(self, collection_id):
        return list(self.collections[collection_id])

    def seed_paste(self, doc_id, document):
        self.documents[doc_id] = copy.deepcopy(document)
        self.collections[PASTES_COLLECTION].append(doc_id)


@pytest.fixture
def settings():
    return Settings(
        store=StoreSettings(
            api_key="test-master-key",
            users_document_id=USERS_DOC,
            pastes_collection_id=PASTES_COLLECTION,
        ),
        auth=AuthSettings(jwt_secret="test-secret"),
        logging=LoggingSettings(level="DEBUG", format="console"),
    )


@pytest.fixture
def store(settings):
    store = InMemoryDocumentStore(settings.store)
    store.documents[USERS_DOC] = {"users": []}
    return store


@pytest.fixture
def forge(settings, store):
    return PasteForgeApp(settings, client=store)


@pytest.fixture
def client_factory(forge):
    """Each call returns a client with its own cookie jar (a separate browser)"""
    from web.main import create_app

    def _make():
        return TestClient(create_app(forge))

    return _make


@pytest.fixture
def client(client_factory):
    return client_factory()
