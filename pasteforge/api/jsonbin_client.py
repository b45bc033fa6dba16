"""HTTP client for the hosted JSON document store (JSONBin v3 API)"""

from typing import Any, Dict, List, Optional, Tuple

import requests

from ..utils.config import StoreSettings
from ..utils.exceptions import NotFoundError, StoreError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Documents per collection listing page
LISTING_PAGE_SIZE = 10


class DocumentStoreClient:
    """
    Thin wrapper over the document store's REST API.

    Every request carries the static API key header. 404 raises
    NotFoundError; any other non-2xx status or transport failure raises
    StoreError. Nothing is retried.
    """

    def __init__(self, settings: StoreSettings, session: Optional[requests.Session] = None):
        self.base_url = settings.base_url.rstrip("/")
        self.api_key = settings.api_key
        self.timeout = (settings.connect_timeout, settings.read_timeout)
        self.session = session or requests.Session()
        self.session.headers.update({"X-Master-Key": self.api_key})

    def _make_request(
        self,
        method: str,
        path: str,
        json_body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make an HTTP request to the document store.

        Args:
            method: HTTP method (GET, PUT, POST, DELETE)
            path: API path (without base URL)
            json_body: Request body, sent as JSON
            headers: Extra headers for this request

        Returns:
            Decoded JSON response body (None for an empty body)

        Raises:
            NotFoundError: If the store answers 404
            StoreError: On network failure or any other non-success status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        request_headers = dict(headers or {})
        if json_body is not None:
            request_headers["Content-Type"] = "application/json"

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Document store request failed", method=method, path=path, error=str(e))
            raise StoreError(f"Document store unreachable: {str(e)}")

        logger.debug(
            "Document store response",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if response.status_code == 404:
            raise NotFoundError(f"Document not found: {path}")

        if not response.ok:
            logger.error(
                "Document store error status",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise StoreError(
                f"Document store returned HTTP {response.status_code}",
                http_status=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Document store returned invalid JSON: {str(e)}", http_status=response.status_code)

    def read(self, doc_id: str) -> Any:
        """Return the stored JSON record of a document"""
        data = self._make_request("GET", f"b/{doc_id}")
        if not isinstance(data, dict) or "record" not in data:
            raise StoreError(f"Unexpected read response for document {doc_id}")
        return data["record"]

    def replace(self, doc_id: str, document: Any) -> None:
        """Overwrite a document with a new JSON value"""
        self._make_request("PUT", f"b/{doc_id}", json_body=document)

    def create(self, document: Any, collection_id: str) -> str:
        """Create a document in a collection and return its store-assigned id"""
        data = self._make_request(
            "POST",
            "b",
            json_body=document,
            headers={"X-Collection-Id": collection_id},
        )
        try:
            return data["metadata"]["id"]
        except (KeyError, TypeError):
            raise StoreError("Document store did not return a document id")

    def delete(self, doc_id: str) -> None:
        self._make_request("DELETE", f"b/{doc_id}")

    def list_collection(self, collection_id: str) -> List[str]:
        """
        List the ids of every document in a collection.

        The store returns listings a page at a time; each following page is
        requested from the id of the last document on the previous one.
        """
        doc_ids: List[str] = []
        path = f"c/{collection_id}/bins"
        while True:
            page, entry_count = self._listing_page(path, collection_id)
            new_ids = [doc_id for doc_id in page if doc_id not in doc_ids]
            doc_ids.extend(new_ids)
            if entry_count < LISTING_PAGE_SIZE or not new_ids:
                return doc_ids
            path = f"c/{collection_id}/bins/{page[-1]}"

    def _listing_page(self, path: str, collection_id: str) -> Tuple[List[str], int]:
        """Document ids on one listing page, and the number of entries it held"""
        data = self._make_request("GET", path)
        if data is None:
            return [], 0
        if not isinstance(data, list):
            raise StoreError(f"Unexpected listing response for collection {collection_id}")

        doc_ids = []
        for item in data:
            if isinstance(item, str):
                doc_ids.append(item)
                continue
            # Listing entries name the document in "record"; older responses used "id"
            doc_id = (item or {}).get("record") or (item or {}).get("id")
            if doc_id:
                doc_ids.append(doc_id)
        return doc_ids, len(data)

    def close(self) -> None:
        self.session.close()
