from __future__ import annotations

from typing import TYPE_CHECKING

from leavedesk.db import engine_from_settings
from leavedesk.store.base import Document, DocumentExistsError, DocumentStore, MalformedDocumentError, StoreError
from leavedesk.store.firestore import FirestoreDocumentStore
from leavedesk.store.memory import InMemoryDocumentStore
from leavedesk.store.sql import SqlDocumentStore

if TYPE_CHECKING:
    from leavedesk.config import Settings

__all__ = [
    "Document",
    "DocumentExistsError",
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "MalformedDocumentError",
    "SqlDocumentStore",
    "StoreError",
    "build_document_store",
]


def build_document_store(settings: Settings) -> DocumentStore:
    """Construct the document store client selected by ``STORE_BACKEND``."""
    if settings.store_backend == "memory":
        return InMemoryDocumentStore()
    if settings.store_backend == "sql":
        return SqlDocumentStore(engine_from_settings(settings))
    if not settings.firestore_project_id:
        msg = "FIRESTORE_PROJECT_ID is required when STORE_BACKEND=firestore"
        raise ValueError(msg)
    return FirestoreDocumentStore(
        settings.firestore_project_id,
        database=settings.firestore_database,
        api_key=settings.firestore_api_key,
        access_token=settings.firestore_access_token,
        base_url=settings.firestore_base_url,
        timeout=settings.store_timeout_seconds,
    )
