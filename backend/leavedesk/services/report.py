"""Reporting: leave statistics for a period and a balance summary. Read-only."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from leavedesk.models.enums import LeaveStatus, LeaveType
from leavedesk.schemas.report import BalanceSummaryResponse, EmployeeBalanceSummary, LeaveStatisticsResponse

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from leavedesk.models.balance import LeaveBalance
    from leavedesk.models.request import LeaveRequest


def leave_statistics(
    requests: Iterable[LeaveRequest],
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> LeaveStatisticsResponse:
    """Count requests whose start date falls in ``[start_date, end_date]``.

    Stored dates are zero-padded ``YYYY-MM-DD`` strings, so they compare
    correctly as text.
    """
    lower = start_date.isoformat() if start_date is not None else None
    upper = end_date.isoformat() if end_date is not None else None

    by_status: Counter[str] = Counter({status.value: 0 for status in LeaveStatus})
    by_type: Counter[str] = Counter({leave_type.value: 0 for leave_type in LeaveType})
    approved_days: Counter[str] = Counter({leave_type.value: 0 for leave_type in LeaveType})
    total = 0

    for request in requests:
        if lower is not None and request.start_date < lower:
            continue
        if upper is not None and request.start_date > upper:
            continue
        total += 1
        by_status[request.status.value] += 1
        by_type[request.leave_type.value] += 1
        if request.status == LeaveStatus.APPROVED:
            approved_days[request.leave_type.value] += request.total_days

    return LeaveStatisticsResponse(
        period_start=start_date,
        period_end=end_date,
        total_requests=total,
        by_status=dict(by_status),
        by_type=dict(by_type),
        approved_days_by_type=dict(approved_days),
    )


def balance_summary(balances: Iterable[LeaveBalance]) -> BalanceSummaryResponse:
    """One row per stored balance record."""
    items = [
        EmployeeBalanceSummary(
            employee_id=balance.employee_id,
            balance_id=balance.id,
            year=balance.year,
            annual=balance.annual_remaining,
            emergency=balance.emergency_remaining,
            medical=balance.medical_remaining,
            total=balance.view().total,
        )
        for balance in balances
    ]
    return BalanceSummaryResponse(items=items, total=len(items))
