"""Reconciliation pass over balances, requests and the audit log.

Detects the partial states that delete-and-recreate edits can leave behind:
a balance that was deleted but never recreated, a deduction whose request was
never marked Approved, and so on. Read-only; fixing is left to an operator.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from leavedesk.models.base import now_utc
from leavedesk.models.enums import AuditAction, LeaveStatus
from leavedesk.schemas.report import ReconciliationResponse

if TYPE_CHECKING:
    from leavedesk.services.audit import AuditTrail
    from leavedesk.services.balance import BalanceLedger
    from leavedesk.services.leave_request import LeaveRequestStore

logger = logging.getLogger(__name__)


def run_reconciliation(
    ledger: BalanceLedger,
    requests: LeaveRequestStore,
    audit: AuditTrail,
) -> ReconciliationResponse:
    """Scan every collection once and report inconsistencies."""
    year = ledger.current_year()
    balances = ledger.list_balances()
    all_requests = requests.list_all()

    balances_by_employee: dict[str, list[str]] = defaultdict(list)
    stale: list[str] = []
    for balance in balances:
        balances_by_employee[balance.employee_id].append(balance.id)
        if balance.year != year:
            stale.append(balance.id)

    requesting_employees = {r.employee_id for r in all_requests}
    missing = sorted(e for e in requesting_employees if e not in balances_by_employee)
    duplicates = sorted(e for e, ids in balances_by_employee.items() if len(ids) > 1)

    deducted_but_pending: list[str] = []
    approved_without_deduction: list[str] = []
    if audit.enabled:
        deducted_for = {e.source_id for e in audit.entries(action=AuditAction.DEDUCT) if e.source_id}
        for request in all_requests:
            if request.status == LeaveStatus.PENDING and request.id in deducted_for:
                deducted_but_pending.append(request.id)
            elif request.status == LeaveStatus.APPROVED and request.id not in deducted_for:
                approved_without_deduction.append(request.id)

    report = ReconciliationResponse(
        checked_at=now_utc(),
        current_year=year,
        missing_balances=missing,
        stale_balances=sorted(stale),
        duplicate_balances=duplicates,
        deducted_but_pending=deducted_but_pending,
        approved_without_deduction=approved_without_deduction,
    )
    if report.clean:
        logger.info("Reconciliation clean: %d balance(s), %d request(s)", len(balances), len(all_requests))
    else:
        logger.warning(
            "Reconciliation found issues: missing=%s stale=%s duplicates=%s deducted_but_pending=%s "
            "approved_without_deduction=%s",
            missing,
            stale,
            duplicates,
            deducted_but_pending,
            approved_without_deduction,
        )
    return report
