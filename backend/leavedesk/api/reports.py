# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import DeskDep, HRDep
from leavedesk.exceptions import AppError
from leavedesk.schemas.report import BalanceSummaryResponse, LeaveStatisticsResponse, ReconciliationResponse

reports_router = APIRouter(prefix="/hr", tags=["reports"])


@reports_router.get("/reports/leaves", response_model=LeaveStatisticsResponse)
def get_leave_statistics(
    desk: DeskDep,
    auth: HRDep,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
) -> LeaveStatisticsResponse:
    """Leave request counts for requests starting within the period (HR only)."""
    if start_date is not None and end_date is not None and end_date < start_date:
        raise AppError("end_date must not be before start_date", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    return desk.leave_statistics(start_date, end_date)


@reports_router.get("/reports/balances", response_model=BalanceSummaryResponse)
def get_balance_summary(desk: DeskDep, auth: HRDep) -> BalanceSummaryResponse:
    """Every stored balance record (HR only)."""
    return desk.balance_summary()


@reports_router.get("/reconciliation", response_model=ReconciliationResponse)
def get_reconciliation(desk: DeskDep, auth: HRDep) -> ReconciliationResponse:
    """Run a read-only reconciliation pass over balances, requests and audit entries (HR only)."""
    return desk.reconcile()
