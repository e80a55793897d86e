from __future__ import annotations

import copy
import threading
from typing import Any

from leavedesk.store.base import Document, DocumentExistsError


class InMemoryDocumentStore:
    """In-process document store for development and tests.

    Field maps are deep-copied on the way in and out so callers never share
    mutable state with the store, matching a remote backend.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def seed(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Insert or overwrite a document for testing."""
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(fields)

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document. Returns None if it does not exist."""
        with self._lock:
            fields = self._collections.get(collection, {}).get(doc_id)
            if fields is None:
                return None
            return Document(id=doc_id, fields=copy.deepcopy(fields))

    def create(self, collection: str, doc_id: str, fields: dict[str, Any]) -> Document:
        """Create a document. Raises DocumentExistsError if the id exists."""
        with self._lock:
            documents = self._collections.setdefault(collection, {})
            if doc_id in documents:
                raise DocumentExistsError(
                    f"Document {collection}/{doc_id} already exists", collection=collection, doc_id=doc_id
                )
            documents[doc_id] = copy.deepcopy(fields)
        return Document(id=doc_id, fields=copy.deepcopy(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is not an error."""
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)

    def scan(self, collection: str) -> list[Document]:
        """Return every document in the collection, in insertion order."""
        with self._lock:
            documents = self._collections.get(collection, {})
            return [Document(id=doc_id, fields=copy.deepcopy(fields)) for doc_id, fields in documents.items()]

    def ping(self) -> None:
        return None

    def close(self) -> None:
        return None
