from sqlmodel import SQLModel

from leavedesk.models.audit import AuditEntry
from leavedesk.models.balance import BalanceView, LeaveBalance
from leavedesk.models.base import generate_document_id, now_utc
from leavedesk.models.document import StoredDocument
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    Collection,
    LeaveErrorCode,
    LeaveStatus,
    LeaveType,
    Outcome,
    RewriteOutcome,
    Role,
)
from leavedesk.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditEntry",
    "BalanceView",
    "Collection",
    "LeaveBalance",
    "LeaveErrorCode",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Outcome",
    "RewriteOutcome",
    "Role",
    "SQLModel",
    "StoredDocument",
    "generate_document_id",
    "now_utc",
]
