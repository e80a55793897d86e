# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, computed_field


class LeaveStatisticsResponse(BaseModel):
    """Leave request statistics for a period."""

    period_start: date | None
    period_end: date | None
    total_requests: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    approved_days_by_type: dict[str, int]


class EmployeeBalanceSummary(BaseModel):
    """One stored balance record."""

    employee_id: str
    balance_id: str
    year: int
    annual: int
    emergency: int
    medical: int
    total: int


class BalanceSummaryResponse(BaseModel):
    """Balance summary across all employees."""

    items: list[EmployeeBalanceSummary]
    total: int


class ReconciliationResponse(BaseModel):
    """Findings of a reconciliation pass.

    Stale-year balances are listed but do not make the pass unclean: they are
    reset lazily on the employee's next access.
    """

    checked_at: datetime
    current_year: int
    missing_balances: list[str]
    stale_balances: list[str]
    duplicate_balances: list[str]
    deducted_but_pending: list[str]
    approved_without_deduction: list[str]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def clean(self) -> bool:
        return not (
            self.missing_balances
            or self.duplicate_balances
            or self.deducted_but_pending
            or self.approved_without_deduction
        )
