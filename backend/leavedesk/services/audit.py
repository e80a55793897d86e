from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from leavedesk.models.audit import AuditEntry
from leavedesk.models.enums import Collection
from leavedesk.services.documents import parse_documents
from leavedesk.store.base import StoreError

if TYPE_CHECKING:
    from leavedesk.models.enums import AuditAction, AuditEntityType
    from leavedesk.store.base import DocumentStore

logger = logging.getLogger(__name__)


class AuditTrail:
    """Append-only audit log kept as documents in the ``AuditLog`` collection.

    An entry is written after the mutation it describes has been stored, so a
    failed audit write never undoes or blocks that mutation; it is logged and
    left for the reconciliation pass to notice.
    """

    def __init__(self, store: DocumentStore, *, enabled: bool = True) -> None:
        self._store = store
        self.enabled = enabled

    def record(
        self,
        *,
        entity_type: AuditEntityType,
        entity_id: str,
        action: AuditAction,
        actor_id: str | None = None,
        source_id: str | None = None,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> AuditEntry | None:
        """Write an audit entry. Returns None when auditing is off or the write failed."""
        if not self.enabled:
            return None
        entry = AuditEntry(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            source_id=source_id,
            before=before,
            after=after,
        )
        try:
            self._store.create(Collection.AUDIT_LOG, entry.id, entry.to_fields())
        except StoreError:
            logger.exception("Failed to write %s audit entry for %s %s", action, entity_type, entity_id)
            return None
        return entry

    def entries(
        self,
        *,
        entity_id: str | None = None,
        action: AuditAction | None = None,
        source_id: str | None = None,
    ) -> list[AuditEntry]:
        """Return audit entries matching every given filter, oldest first."""
        entries = parse_documents(
            AuditEntry.from_document, self._store.scan(Collection.AUDIT_LOG), Collection.AUDIT_LOG
        )
        if entity_id is not None:
            entries = [e for e in entries if e.entity_id == entity_id]
        if action is not None:
            entries = [e for e in entries if e.action == action]
        if source_id is not None:
            entries = [e for e in entries if e.source_id == source_id]
        return sorted(entries, key=lambda e: (e.created_at, e.id))
