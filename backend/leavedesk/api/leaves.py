# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from leavedesk.api.deps import AuthDep, DeskDep, require_self_or_hr
from leavedesk.exceptions import AppError
from leavedesk.schemas.leave import (
    ApplyLeavePayload,
    CheckResetResponse,
    LeaveBalanceDataResponse,
    LeaveResultResponse,
)
from leavedesk.services.lifecycle import LeaveResult

employee_leaves_router = APIRouter(
    prefix="/employees/{employee_id}",
    tags=["leaves"],
    dependencies=[Depends(require_self_or_hr)],
)


def result_response(result: LeaveResult) -> LeaveResultResponse:
    """Map a lifecycle result onto the wire schema. Outcomes never become HTTP errors."""
    return LeaveResultResponse(
        outcome=result.outcome,
        ok=result.ok,
        message=result.message,
        leave_id=result.leave_id,
        error_code=result.error_code,
        remaining=result.remaining,
    )


@employee_leaves_router.post("/leaves", response_model=LeaveResultResponse)
def apply_leave(
    employee_id: str,
    payload: ApplyLeavePayload,
    desk: DeskDep,
    auth: AuthDep,
) -> LeaveResultResponse:
    """Submit a leave application; it is stored as Pending."""
    result = desk.apply_leave(
        employee_id,
        payload.leave_type,
        payload.start_date,
        payload.end_date,
        payload.total_days,
        payload.reason,
        actor_id=auth.user_id,
    )
    return result_response(result)


@employee_leaves_router.get("/leaves", response_class=PlainTextResponse)
def get_leaves(employee_id: str, desk: DeskDep) -> str:
    """Text listing of the employee's leave history."""
    return desk.get_leaves_by_employee(employee_id)


@employee_leaves_router.get("/leave-balance", response_class=PlainTextResponse)
def get_leave_balance(employee_id: str, desk: DeskDep) -> str:
    """Text summary of the current-year balance, created or reset on demand."""
    return desk.get_leave_balance(employee_id)


@employee_leaves_router.get("/leave-balance/data", response_model=LeaveBalanceDataResponse)
def get_leave_balance_data(employee_id: str, desk: DeskDep) -> LeaveBalanceDataResponse:
    """Typed current-year balance."""
    view = desk.get_leave_balance_data(employee_id)
    if view is None:
        raise AppError("Failed to get leave balance.", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return LeaveBalanceDataResponse(
        employee_id=employee_id,
        annual=view.annual,
        emergency=view.emergency,
        medical=view.medical,
        total=view.total,
    )


@employee_leaves_router.post("/leave-balance/check-reset", response_model=CheckResetResponse)
def check_and_reset_leave_balance(employee_id: str, desk: DeskDep) -> CheckResetResponse:
    """Roll the employee's balance over to the current year if needed."""
    return CheckResetResponse(employee_id=employee_id, success=desk.check_and_reset_leave_balance(employee_id))
