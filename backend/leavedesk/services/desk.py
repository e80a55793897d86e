"""Caller-facing leave operations for the HR and employee clients.

Every operation returns something the client can show as-is: a LeaveResult
carrying a message, or a plain-text listing. Store failures become a
"Failed to ..." message here and never reach the caller as an exception.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from leavedesk.models.base import now_utc
from leavedesk.models.enums import LeaveStatus, Outcome
from leavedesk.services import report as report_service
from leavedesk.services.audit import AuditTrail
from leavedesk.services.balance import BalanceLedger
from leavedesk.services.leave_request import LeaveRequestStore
from leavedesk.services.lifecycle import LeaveLifecycleEngine, LeaveResult
from leavedesk.services.reconcile import run_reconciliation
from leavedesk.store.base import StoreError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from leavedesk.config import Settings
    from leavedesk.models.balance import BalanceView, LeaveBalance
    from leavedesk.models.request import LeaveRequest
    from leavedesk.schemas.report import BalanceSummaryResponse, LeaveStatisticsResponse, ReconciliationResponse
    from leavedesk.store.base import DocumentStore

logger = logging.getLogger(__name__)

_RULE = "=" * 40
_DIVIDER = "-" * 40


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------


def _render_balance(balance: LeaveBalance) -> str:
    view = balance.view()
    return "\n".join(
        [
            _RULE,
            "           MY LEAVE BALANCE",
            _RULE,
            f"Employee        : {balance.employee_id}",
            f"Year            : {balance.year}",
            _DIVIDER,
            f"Annual Leave    : {view.annual} days",
            f"Emergency Leave : {view.emergency} days",
            f"Medical Leave   : {view.medical} days",
            _DIVIDER,
            f"Total Remaining : {view.total} days",
            _RULE,
        ]
    )


def _render_request(index: int, request: LeaveRequest, *, show_employee: bool) -> list[str]:
    lines = [f"[{index}]", f"Leave ID    : {request.id}"]
    if show_employee:
        lines.append(f"Employee    : {request.employee_id}")
    lines.extend(
        [
            f"Type        : {request.leave_type.capitalize()}",
            f"Period      : {request.start_date} to {request.end_date}",
            f"Total Days  : {request.total_days}",
            f"Reason      : {request.reason}",
            f"Status      : {request.status}",
            f"Applied On  : {request.created_at:%Y-%m-%d %H:%M} UTC",
            _DIVIDER,
        ]
    )
    return lines


def _render_requests(title: str, header: list[str], requests: list[LeaveRequest], *, show_employee: bool) -> str:
    lines = [_RULE, f"           {title}", _RULE, *header, _DIVIDER]
    if not requests:
        lines.extend(["No leave applications found.", _DIVIDER])
    for index, request in enumerate(requests, start=1):
        lines.extend(_render_request(index, request, show_employee=show_employee))
    lines.append(_RULE)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


class LeaveDesk:
    """Wires the ledger, request store and lifecycle engine for one document store.

    Everything is passed in explicitly, so tests build fresh instances with
    their own store and clock.
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings,
        *,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = now_utc,
    ) -> None:
        self.store = store
        self.audit = AuditTrail(store, enabled=settings.audit_enabled)
        self.ledger = BalanceLedger(
            store,
            allocation_days=settings.leave_allocation_days,
            id_digest_length=settings.balance_id_digest_length,
            today=today,
            audit=self.audit,
        )
        self.requests = LeaveRequestStore(store, now=now, audit=self.audit)
        self.engine = LeaveLifecycleEngine(
            self.requests, self.ledger, serialize_decisions=settings.serialize_decisions
        )

    # -----------------------------------------------------------------------
    # Employee operations
    # -----------------------------------------------------------------------

    def apply_leave(
        self,
        employee_id: str,
        leave_type: str | None,
        start_date: str | None,
        end_date: str | None,
        total_days: int,
        reason: str | None,
        *,
        actor_id: str | None = None,
    ) -> LeaveResult:
        return self.engine.apply(
            employee_id, leave_type, start_date, end_date, total_days, reason, actor_id=actor_id
        )

    def get_leaves_by_employee(self, employee_id: str) -> str:
        try:
            requests = self.requests.list_by_employee(employee_id)
        except StoreError:
            logger.exception("Failed to list leave requests for employee %s", employee_id)
            return "Failed to get leave history."
        return _render_requests(
            "MY LEAVE HISTORY", [f"Employee: {employee_id}"], requests, show_employee=False
        )

    def get_leave_balance(self, employee_id: str) -> str:
        """Text balance summary; rolls the balance over to the current year first."""
        try:
            balance = self.ledger.ensure_current_year(employee_id)
        except StoreError:
            logger.exception("Failed to read leave balance for employee %s", employee_id)
            return "Failed to get leave balance."
        return _render_balance(balance)

    def get_leave_balance_data(self, employee_id: str) -> BalanceView | None:
        """Typed balance for programmatic checks before applying. None if the store failed."""
        try:
            return self.ledger.remaining(employee_id)
        except StoreError:
            logger.exception("Failed to read leave balance data for employee %s", employee_id)
            return None

    def check_and_reset_leave_balance(self, employee_id: str) -> bool:
        return self.engine.check_and_reset_year(employee_id)

    # -----------------------------------------------------------------------
    # HR operations
    # -----------------------------------------------------------------------

    def open_leave_balance(self, employee_id: str) -> LeaveResult:
        """Open (or confirm) a newly hired employee's current-year balance."""
        try:
            balance = self.ledger.open_for_hire(employee_id)
        except StoreError:
            logger.exception("Failed to open leave balance for employee %s", employee_id)
            return LeaveResult(Outcome.STORE_FAILURE, "Leave balance creation failed. Please try again.")
        return LeaveResult(
            Outcome.SUCCESS,
            f"Leave balance {balance.id} is ready for employee {employee_id} (year {balance.year}).",
        )

    def get_all_pending_leaves(self) -> str:
        try:
            pending = self.requests.list_by_status(LeaveStatus.PENDING)
        except StoreError:
            logger.exception("Failed to list pending leave requests")
            return "Failed to get pending leave requests."
        return _render_requests(
            "PENDING LEAVE REQUESTS", [f"Total Pending: {len(pending)}"], pending, show_employee=True
        )

    def approve_leave(self, leave_id: str, *, actor_id: str | None = None) -> LeaveResult:
        return self.engine.approve(leave_id, actor_id=actor_id)

    def reject_leave(self, leave_id: str, *, actor_id: str | None = None) -> LeaveResult:
        return self.engine.reject(leave_id, actor_id=actor_id)

    # -----------------------------------------------------------------------
    # Reports (store failures propagate as StoreError)
    # -----------------------------------------------------------------------

    def leave_statistics(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> LeaveStatisticsResponse:
        return report_service.leave_statistics(self.requests.list_all(), start_date=start_date, end_date=end_date)

    def balance_summary(self) -> BalanceSummaryResponse:
        return report_service.balance_summary(self.ledger.list_balances())

    def reconcile(self) -> ReconciliationResponse:
        return run_reconciliation(self.ledger, self.requests, self.audit)
