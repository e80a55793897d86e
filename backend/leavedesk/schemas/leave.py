# ruff: noqa: TC001
from __future__ import annotations

from pydantic import BaseModel

from leavedesk.models.enums import LeaveErrorCode, Outcome

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ApplyLeavePayload(BaseModel):
    """Request body for a leave application.

    Fields are deliberately loose; the lifecycle engine reports each invalid
    field as its own result instead of a 422.
    """

    leave_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    total_days: int = 0
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResultResponse(BaseModel):
    """Outcome of apply/approve/reject/open, with a message ready for display."""

    outcome: Outcome
    ok: bool
    message: str
    leave_id: str | None = None
    error_code: LeaveErrorCode | None = None
    remaining: int | None = None


class CheckResetResponse(BaseModel):
    """Result of the year-rollover check."""

    employee_id: str
    success: bool


class LeaveBalanceDataResponse(BaseModel):
    """Typed current-year balance for programmatic checks before applying."""

    employee_id: str
    annual: int
    emergency: int
    medical: int
    total: int
