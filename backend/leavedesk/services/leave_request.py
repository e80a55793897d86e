from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leavedesk.models.base import generate_document_id, now_utc
from leavedesk.models.enums import AuditAction, AuditEntityType, Collection, LeaveStatus, RewriteOutcome
from leavedesk.models.request import LeaveRequest
from leavedesk.services.documents import parse_document, parse_documents
from leavedesk.store.base import StoreError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from leavedesk.models.enums import LeaveType
    from leavedesk.services.audit import AuditTrail
    from leavedesk.store.base import DocumentStore

logger = logging.getLogger(__name__)

_AUDIT_ACTION_BY_STATUS = {
    LeaveStatus.APPROVED: AuditAction.APPROVE,
    LeaveStatus.REJECTED: AuditAction.REJECT,
}


@dataclass
class StatusRewrite:
    """Result of ``LeaveRequestStore.rewrite_status``.

    ``request`` is the rewritten request on success, the unchanged request when
    it was already processed, and whatever was last read otherwise.
    """

    outcome: RewriteOutcome
    request: LeaveRequest | None = None


class LeaveRequestStore:
    """Collection-level access to LeaveRequest documents."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        now: Callable[[], datetime] = now_utc,
        audit: AuditTrail | None = None,
    ) -> None:
        self._store = store
        self._now = now
        self._audit = audit

    def create(
        self,
        *,
        employee_id: str,
        leave_type: LeaveType,
        start_date: str,
        end_date: str,
        total_days: int,
        reason: str,
        actor_id: str | None = None,
    ) -> LeaveRequest:
        """Persist a new Pending request under a fresh id. Raises StoreError on failure."""
        request = LeaveRequest(
            id=generate_document_id("leave"),
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=self._now(),
        )
        self._store.create(Collection.LEAVE_REQUEST, request.id, request.to_fields())
        logger.info(
            "Leave request %s submitted by employee %s (%s, %d day(s))", request.id, employee_id, leave_type, total_days
        )

        if self._audit is not None:
            self._audit.record(
                entity_type=AuditEntityType.LEAVE_REQUEST,
                entity_id=request.id,
                action=AuditAction.APPLY,
                actor_id=actor_id or employee_id,
                after=request.to_fields(),
            )
        return request

    def get_by_id(self, leave_id: str) -> LeaveRequest | None:
        """Fetch one request. Raises MalformedDocumentError if the stored copy cannot be decoded."""
        document = self._store.get(Collection.LEAVE_REQUEST, leave_id)
        if document is None:
            return None
        return parse_document(LeaveRequest.from_document, document, Collection.LEAVE_REQUEST)

    def list_all(self) -> list[LeaveRequest]:
        """Every request, oldest first."""
        requests = parse_documents(
            LeaveRequest.from_document, self._store.scan(Collection.LEAVE_REQUEST), Collection.LEAVE_REQUEST
        )
        return sorted(requests, key=lambda r: (r.created_at, r.id))

    def list_by_employee(self, employee_id: str) -> list[LeaveRequest]:
        return [r for r in self.list_all() if r.employee_id == employee_id]

    def list_by_status(self, status: LeaveStatus) -> list[LeaveRequest]:
        return [r for r in self.list_all() if r.status == status]

    def rewrite_status(
        self,
        leave_id: str,
        new_status: LeaveStatus,
        *,
        actor_id: str | None = None,
    ) -> StatusRewrite:
        """Move a Pending request to a terminal status by delete + create under the same id.

        Never overwrites a request that is no longer Pending; that case is
        reported as ALREADY_PROCESSED together with the stored request.
        """
        if new_status == LeaveStatus.PENDING:
            msg = "A leave request can only be rewritten to a terminal status"
            raise ValueError(msg)

        current: LeaveRequest | None = None
        try:
            current = self.get_by_id(leave_id)
            if current is None:
                return StatusRewrite(RewriteOutcome.NOT_FOUND)
            if not current.is_pending:
                return StatusRewrite(RewriteOutcome.ALREADY_PROCESSED, current)

            updated = current.model_copy(update={"status": new_status})
            self._store.delete(Collection.LEAVE_REQUEST, leave_id)
            self._store.create(Collection.LEAVE_REQUEST, leave_id, updated.to_fields())
        except StoreError:
            logger.exception("Failed to mark leave request %s as %s", leave_id, new_status)
            return StatusRewrite(RewriteOutcome.FAILED, current)

        logger.info("Leave request %s marked %s", leave_id, new_status)
        if self._audit is not None:
            self._audit.record(
                entity_type=AuditEntityType.LEAVE_REQUEST,
                entity_id=leave_id,
                action=_AUDIT_ACTION_BY_STATUS[new_status],
                actor_id=actor_id,
                before=current.to_fields(),
                after=updated.to_fields(),
            )
        return StatusRewrite(RewriteOutcome.REWRITTEN, updated)
