# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from leavedesk.models.base import generate_document_id, now_utc, parse_timestamp
from leavedesk.models.enums import AuditAction, AuditEntityType

if TYPE_CHECKING:
    from leavedesk.store.base import Document


class AuditEntry(BaseModel):
    """Immutable record of one balance or request mutation."""

    id: str = Field(default_factory=lambda: generate_document_id("audit"))
    entity_type: AuditEntityType
    entity_id: str
    action: AuditAction
    actor_id: str | None = None
    source_id: str | None = None
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=now_utc)

    @classmethod
    def from_document(cls, document: Document) -> AuditEntry:
        fields = document.fields
        return cls(
            id=document.id,
            entity_type=AuditEntityType(fields["entity_type"]),
            entity_id=fields["entity_id"],
            action=AuditAction(fields["action"]),
            actor_id=fields.get("actor_id"),
            source_id=fields.get("source_id"),
            before=fields.get("before"),
            after=fields.get("after"),
            created_at=parse_timestamp(fields["created_at"]),
        )

    def to_fields(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "action": self.action.value,
            "actor_id": self.actor_id,
            "source_id": self.source_id,
            "before": self.before,
            "after": self.after,
            "created_at": self.created_at.isoformat(),
        }
