"""Contract for the whole-document store every leave component persists through.

The store has no partial update, no conditional write and no multi-document
transaction: callers edit a document by deleting it and creating it again under
the same id, and filter collections in memory after a full scan.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A stored document: its id within the collection plus its field map."""

    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class StoreError(Exception):
    """Transport or backend failure while talking to the document store."""

    def __init__(self, message: str, *, collection: str | None = None, doc_id: str | None = None) -> None:
        self.message = message
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(message)


class DocumentExistsError(StoreError):
    """Raised by ``create`` when the id is already taken in the collection."""


class MalformedDocumentError(StoreError):
    """A stored document is missing fields or holds values of the wrong type."""


@runtime_checkable
class DocumentStore(Protocol):
    """Interface for the document store client."""

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document. Returns None if it does not exist."""
        ...

    def create(self, collection: str, doc_id: str, fields: dict[str, Any]) -> Document:
        """Create a document. Raises DocumentExistsError if the id exists."""
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is not an error."""
        ...

    def scan(self, collection: str) -> list[Document]:
        """Return every document in the collection."""
        ...

    def ping(self) -> None:
        """Raise StoreError if the backend is unreachable."""
        ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...
