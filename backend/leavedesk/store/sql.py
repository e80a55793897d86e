from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel, col

from leavedesk.db import create_session_factory
from leavedesk.models.document import StoredDocument
from leavedesk.store.base import Document, DocumentExistsError, StoreError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class SqlDocumentStore:
    """Document store backed by a single SQL table of JSON field maps.

    Each call runs in its own short session and commits immediately, so the
    store offers exactly the same per-document guarantees as the remote
    backends: no transaction spans two calls.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    def create_schema(self) -> None:
        """Create the document table if it does not exist (dev/test fallback for Alembic)."""
        SQLModel.metadata.create_all(self._engine, tables=[StoredDocument.__table__])  # type: ignore[attr-defined]

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document. Returns None if it does not exist."""
        try:
            with self._session_factory() as session:
                row = session.get(StoredDocument, (collection, doc_id))
                if row is None:
                    return None
                return Document(id=row.doc_id, fields=dict(row.fields_json))
        except SQLAlchemyError as exc:
            raise StoreError(f"get {collection}/{doc_id} failed: {exc}", collection=collection, doc_id=doc_id) from exc

    def create(self, collection: str, doc_id: str, fields: dict[str, Any]) -> Document:
        """Create a document. Raises DocumentExistsError if the id exists."""
        try:
            with self._session_factory() as session:
                session.add(StoredDocument(collection=collection, doc_id=doc_id, fields_json=dict(fields)))
                session.commit()
        except IntegrityError as exc:
            raise DocumentExistsError(
                f"Document {collection}/{doc_id} already exists", collection=collection, doc_id=doc_id
            ) from exc
        except SQLAlchemyError as exc:
            raise StoreError(
                f"create {collection}/{doc_id} failed: {exc}", collection=collection, doc_id=doc_id
            ) from exc
        return Document(id=doc_id, fields=dict(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is not an error."""
        try:
            with self._session_factory() as session:
                session.execute(
                    delete(StoredDocument).where(
                        col(StoredDocument.collection) == collection,
                        col(StoredDocument.doc_id) == doc_id,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(
                f"delete {collection}/{doc_id} failed: {exc}", collection=collection, doc_id=doc_id
            ) from exc

    def scan(self, collection: str) -> list[Document]:
        """Return every document in the collection, oldest first."""
        try:
            with self._session_factory() as session:
                result = session.execute(
                    select(StoredDocument)
                    .where(col(StoredDocument.collection) == collection)
                    .order_by(col(StoredDocument.created_at), col(StoredDocument.doc_id))
                )
                rows = list(result.scalars().all())
                return [Document(id=row.doc_id, fields=dict(row.fields_json)) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"scan {collection} failed: {exc}", collection=collection) from exc

    def ping(self) -> None:
        """Raise StoreError if the database is unreachable."""
        try:
            with self._session_factory() as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(f"database unreachable: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()
