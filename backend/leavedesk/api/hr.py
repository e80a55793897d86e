# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from leavedesk.api.deps import DeskDep, HRDep
from leavedesk.api.leaves import result_response
from leavedesk.schemas.leave import LeaveResultResponse

hr_router = APIRouter(prefix="/hr", tags=["hr"])


@hr_router.post("/employees/{employee_id}/leave-balance", response_model=LeaveResultResponse)
def open_leave_balance(employee_id: str, desk: DeskDep, auth: HRDep) -> LeaveResultResponse:
    """Open the current-year balance for a new hire (HR only)."""
    return result_response(desk.open_leave_balance(employee_id))


@hr_router.get("/leaves/pending", response_class=PlainTextResponse)
def get_pending_leaves(desk: DeskDep, auth: HRDep) -> str:
    """Text listing of every Pending request (HR only)."""
    return desk.get_all_pending_leaves()


@hr_router.post("/leaves/{leave_id}/approve", response_model=LeaveResultResponse)
def approve_leave(leave_id: str, desk: DeskDep, auth: HRDep) -> LeaveResultResponse:
    """Approve a Pending request and deduct the employee's balance (HR only)."""
    return result_response(desk.approve_leave(leave_id, actor_id=auth.user_id))


@hr_router.post("/leaves/{leave_id}/reject", response_model=LeaveResultResponse)
def reject_leave(leave_id: str, desk: DeskDep, auth: HRDep) -> LeaveResultResponse:
    """Reject a Pending request (HR only)."""
    return result_response(desk.reject_leave(leave_id, actor_id=auth.user_id))
