from __future__ import annotations

import enum


class Collection(enum.StrEnum):
    """Document store collections owned by the service."""

    LEAVE_BALANCE = "LeaveBalance"
    LEAVE_REQUEST = "LeaveRequest"
    AUDIT_LOG = "AuditLog"


class LeaveType(enum.StrEnum):
    """Leave categories, each with its own yearly allocation."""

    ANNUAL = "annual"
    EMERGENCY = "emergency"
    MEDICAL = "medical"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests. Approved and Rejected are terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Role(enum.StrEnum):
    """Client roles allowed to call the service."""

    HR = "hr"
    EMPLOYEE = "employee"


class Outcome(enum.StrEnum):
    """Category of a lifecycle operation result."""

    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    STORE_FAILURE = "STORE_FAILURE"
    INCONSISTENT = "INCONSISTENT"


class LeaveErrorCode(enum.StrEnum):
    """Reason an application was refused before touching the store."""

    INVALID_LEAVE_TYPE = "INVALID_LEAVE_TYPE"
    MISSING_START_DATE = "MISSING_START_DATE"
    MISSING_END_DATE = "MISSING_END_DATE"
    MALFORMED_START_DATE = "MALFORMED_START_DATE"
    MALFORMED_END_DATE = "MALFORMED_END_DATE"
    END_BEFORE_START = "END_BEFORE_START"
    NON_POSITIVE_DAYS = "NON_POSITIVE_DAYS"
    BLANK_REASON = "BLANK_REASON"
    REASON_TOO_LONG = "REASON_TOO_LONG"


class RewriteOutcome(enum.StrEnum):
    """Result of rewriting a leave request's status in place."""

    REWRITTEN = "REWRITTEN"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    FAILED = "FAILED"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_BALANCE = "LEAVE_BALANCE"
    LEAVE_REQUEST = "LEAVE_REQUEST"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    RESET = "RESET"
    DEDUCT = "DEDUCT"
    APPLY = "APPLY"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
