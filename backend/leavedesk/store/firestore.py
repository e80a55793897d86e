"""Document store client for the Cloud Firestore REST API (v1).

Firestore wraps every field value in a typed envelope (``stringValue``,
``integerValue`` ...); this module converts between those envelopes and plain
JSON-compatible Python values so the rest of the service never sees them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from leavedesk.store.base import Document, DocumentExistsError, StoreError

logger = logging.getLogger(__name__)

FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"
DEFAULT_PAGE_SIZE = 300


# ---------------------------------------------------------------------------
# Value codec
# ---------------------------------------------------------------------------


def encode_value(value: Any) -> dict[str, Any]:
    """Wrap a Python value in a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    # bool before int: bool is a subclass of int.
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": value.isoformat()}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    msg = f"Unsupported Firestore value type: {type(value).__name__}"
    raise TypeError(msg)


def encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: encode_value(value) for key, value in fields.items()}


def decode_value(value: dict[str, Any]) -> Any:
    """Unwrap a Firestore typed value into a plain Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "nullValue" in value:
        return None
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    msg = f"Unsupported Firestore value: {sorted(value)}"
    raise ValueError(msg)


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def _document_from_payload(payload: dict[str, Any]) -> Document:
    doc_id = payload["name"].rsplit("/", 1)[-1]
    return Document(id=doc_id, fields=decode_fields(payload.get("fields", {})))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class FirestoreDocumentStore:
    """Blocking Firestore REST client.

    Authenticates with either a web API key (``?key=``) or an OAuth bearer
    token. Every request carries the configured timeout; a timeout or any
    non-success status surfaces as StoreError.
    """

    def __init__(
        self,
        project_id: str,
        *,
        database: str = "(default)",
        api_key: str | None = None,
        access_token: str | None = None,
        base_url: str = FIRESTORE_BASE_URL,
        timeout: float = 10.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        client: httpx.Client | None = None,
    ) -> None:
        self._root = f"{base_url.rstrip('/')}/projects/{project_id}/databases/{database}/documents"
        self._api_key = api_key
        self._access_token = access_token
        self._page_size = page_size
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        params: dict[str, Any] = dict(kwargs.pop("params", None) or {})
        if self._api_key:
            params["key"] = self._api_key
        headers: dict[str, str] = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        try:
            return self._client.request(method, url, params=params, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str, collection: str, doc_id: str | None = None) -> None:
        if response.is_success:
            return
        logger.error("Firestore %s on %s returned %d: %s", action, collection, response.status_code, response.text)
        raise StoreError(
            f"Firestore {action} failed with status {response.status_code}", collection=collection, doc_id=doc_id
        )

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document. Returns None if it does not exist."""
        response = self._request("GET", f"{self._root}/{collection}/{doc_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response, "get", collection, doc_id)
        return _document_from_payload(response.json())

    def create(self, collection: str, doc_id: str, fields: dict[str, Any]) -> Document:
        """Create a document. Raises DocumentExistsError if the id exists."""
        response = self._request(
            "POST",
            f"{self._root}/{collection}",
            params={"documentId": doc_id},
            json={"fields": encode_fields(fields)},
        )
        if response.status_code == httpx.codes.CONFLICT:
            raise DocumentExistsError(
                f"Document {collection}/{doc_id} already exists", collection=collection, doc_id=doc_id
            )
        self._raise_for_status(response, "create", collection, doc_id)
        return _document_from_payload(response.json())

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is not an error."""
        response = self._request("DELETE", f"{self._root}/{collection}/{doc_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return
        self._raise_for_status(response, "delete", collection, doc_id)

    def scan(self, collection: str) -> list[Document]:
        """Return every document in the collection, following page tokens."""
        documents: list[Document] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": self._page_size}
            if page_token:
                params["pageToken"] = page_token
            response = self._request("GET", f"{self._root}/{collection}", params=params)
            self._raise_for_status(response, "scan", collection)
            payload = response.json()
            documents.extend(_document_from_payload(doc) for doc in payload.get("documents", []))
            page_token = payload.get("nextPageToken")
            if not page_token:
                return documents

    def ping(self) -> None:
        """Raise StoreError if Firestore is unreachable or rejects our credentials."""
        response = self._request("POST", f"{self._root}:listCollectionIds", json={"pageSize": 1})
        self._raise_for_status(response, "ping", "(root)")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
