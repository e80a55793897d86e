"""Decoding stored documents into domain models.

The store holds whatever clients wrote, so a document may lack fields or
carry values of the wrong type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

from leavedesk.store.base import MalformedDocumentError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from leavedesk.store.base import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_document(parser: Callable[[Document], T], document: Document, collection: str) -> T:
    """Decode one document. Raises MalformedDocumentError if it cannot be decoded."""
    try:
        return parser(document)
    except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as exc:
        msg = f"Document {collection}/{document.id} is malformed: {exc!r}"
        raise MalformedDocumentError(msg, collection=collection, doc_id=document.id) from exc


def parse_documents(parser: Callable[[Document], T], documents: Iterable[Document], collection: str) -> list[T]:
    """Decode a scan, skipping (and logging) documents that cannot be decoded."""
    parsed: list[T] = []
    for document in documents:
        try:
            parsed.append(parse_document(parser, document, collection))
        except MalformedDocumentError as exc:
            logger.warning("Skipping malformed document: %s", exc.message)
    return parsed
