"""Leave lifecycle engine: apply, approve and reject against the ledger and request store.

State machine per request::

    Pending --approve--> Approved   (terminal)
    Pending --reject---> Rejected   (terminal)

Approval deducts the balance *before* flipping the request status. If the
status rewrite then fails, the request stays Pending with the balance already
reduced, which under-grants leave rather than letting an approved request
skip its deduction. That state is reported as INCONSISTENT for an operator.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leavedesk.models.enums import LeaveErrorCode, LeaveStatus, LeaveType, Outcome, RewriteOutcome
from leavedesk.store.base import StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from leavedesk.services.balance import BalanceLedger
    from leavedesk.services.leave_request import LeaveRequestStore

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
MIN_YEAR = 1900
MAX_YEAR = 2100
LOCK_STRIPES = 64
MAX_REASON_LENGTH = 1000


@dataclass(frozen=True)
class LeaveResult:
    """Outcome of a lifecycle operation, rendered directly by the caller's UI."""

    outcome: Outcome
    message: str
    leave_id: str | None = None
    error_code: LeaveErrorCode | None = None
    remaining: int | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def parse_leave_type(value: str | None) -> LeaveType | None:
    """Case-insensitive leave type lookup. Returns None for unknown types."""
    if value is None:
        return None
    try:
        return LeaveType(value.strip().lower())
    except ValueError:
        return None


def parse_date_parts(value: str) -> tuple[int, int, int] | None:
    """Syntactic ``YYYY-MM-DD`` check. Does not reject impossible dates such as Feb 31."""
    match = _DATE_PATTERN.match(value.strip())
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    if not MIN_YEAR <= year <= MAX_YEAR or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return year, month, day


def _invalid(code: LeaveErrorCode, message: str) -> LeaveResult:
    return LeaveResult(Outcome.VALIDATION_ERROR, message, error_code=code)


def _store_failure(message: str, leave_id: str | None = None) -> LeaveResult:
    return LeaveResult(Outcome.STORE_FAILURE, message, leave_id=leave_id)


class StripedLocks:
    """Fixed pool of locks picked by key hash; one key maps to one lock."""

    def __init__(self, stripes: int = LOCK_STRIPES) -> None:
        self._locks = [threading.Lock() for _ in range(stripes)]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._locks[hash(key) % len(self._locks)]
        with lock:
            yield


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class LeaveLifecycleEngine:
    """Orchestrates leave requests against the balance ledger.

    Stateless between calls. With ``serialize_decisions`` enabled, approve and
    reject for the same employee are serialized inside this process; across
    processes the "still Pending" check remains the only guard.
    """

    def __init__(
        self,
        requests: LeaveRequestStore,
        ledger: BalanceLedger,
        *,
        serialize_decisions: bool = False,
    ) -> None:
        self._requests = requests
        self._ledger = ledger
        self._locks = StripedLocks() if serialize_decisions else None

    # -----------------------------------------------------------------------
    # Apply
    # -----------------------------------------------------------------------

    def apply(
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
        """Validate an application and store it as Pending.

        ``total_days`` is stored exactly as supplied; it is not recomputed from
        the date span.
        """
        canonical_type = parse_leave_type(leave_type)
        if canonical_type is None:
            return _invalid(
                LeaveErrorCode.INVALID_LEAVE_TYPE,
                "Invalid leave type. Please choose 'annual', 'emergency', or 'medical'.",
            )
        if start_date is None or not start_date.strip():
            return _invalid(LeaveErrorCode.MISSING_START_DATE, "Start date is required.")
        if end_date is None or not end_date.strip():
            return _invalid(LeaveErrorCode.MISSING_END_DATE, "End date is required.")
        start_parts = parse_date_parts(start_date)
        if start_parts is None:
            return _invalid(LeaveErrorCode.MALFORMED_START_DATE, "Start date must use the format YYYY-MM-DD.")
        end_parts = parse_date_parts(end_date)
        if end_parts is None:
            return _invalid(LeaveErrorCode.MALFORMED_END_DATE, "End date must use the format YYYY-MM-DD.")
        if end_parts < start_parts:
            return _invalid(LeaveErrorCode.END_BEFORE_START, "End date cannot be before start date.")
        if total_days <= 0:
            return _invalid(LeaveErrorCode.NON_POSITIVE_DAYS, "Total days must be greater than 0.")
        if reason is None or not reason.strip():
            return _invalid(LeaveErrorCode.BLANK_REASON, "Reason is required.")
        if len(reason) > MAX_REASON_LENGTH:
            return _invalid(
                LeaveErrorCode.REASON_TOO_LONG, f"Reason must be at most {MAX_REASON_LENGTH} characters."
            )

        try:
            request = self._requests.create(
                employee_id=employee_id,
                leave_type=canonical_type,
                start_date=start_date.strip(),
                end_date=end_date.strip(),
                total_days=total_days,
                reason=reason.strip(),
                actor_id=actor_id,
            )
        except StoreError:
            logger.exception("Failed to store leave application for employee %s", employee_id)
            return _store_failure("Failed to submit leave application. Please try again.")

        return LeaveResult(
            Outcome.SUCCESS,
            "Leave application submitted successfully!\n"
            f"Leave ID: {request.id}\n"
            f"Status: {LeaveStatus.PENDING} (awaiting HR approval)",
            leave_id=request.id,
        )

    # -----------------------------------------------------------------------
    # Decisions
    # -----------------------------------------------------------------------

    @contextmanager
    def _decision_guard(self, leave_id: str) -> Iterator[None]:
        if self._locks is None:
            yield
            return
        # employee_id never changes, so a read outside the lock is safe to key on.
        request = self._requests.get_by_id(leave_id)
        with self._locks.hold(request.employee_id if request is not None else leave_id):
            yield

    def approve(self, leave_id: str, *, actor_id: str | None = None) -> LeaveResult:
        """Approve a Pending request after checking and deducting the balance."""
        try:
            with self._decision_guard(leave_id):
                return self._approve(leave_id, actor_id)
        except StoreError:
            logger.exception("Failed to approve leave request %s", leave_id)
            return _store_failure(f"Failed to approve leave request {leave_id}. Please try again.", leave_id)

    def reject(self, leave_id: str, *, actor_id: str | None = None) -> LeaveResult:
        """Reject a Pending request. The balance is not touched."""
        try:
            with self._decision_guard(leave_id):
                return self._reject(leave_id, actor_id)
        except StoreError:
            logger.exception("Failed to reject leave request %s", leave_id)
            return _store_failure(f"Failed to reject leave request {leave_id}. Please try again.", leave_id)

    def _approve(self, leave_id: str, actor_id: str | None) -> LeaveResult:
        request = self._requests.get_by_id(leave_id)
        if request is None:
            return LeaveResult(Outcome.NOT_FOUND, f"Leave request {leave_id} not found.", leave_id=leave_id)
        if not request.is_pending:
            return LeaveResult(
                Outcome.CONFLICT, f"Leave request {leave_id} is already {request.status}.", leave_id=leave_id
            )

        # The balance is resolved now, not when the request was filed.
        balance = self._ledger.ensure_current_year(request.employee_id)
        if request.created_at.year != balance.year:
            logger.info(
                "Leave request %s filed in %d is charged to the %d balance",
                leave_id,
                request.created_at.year,
                balance.year,
            )

        available = balance.remaining_for(request.leave_type)
        if available < request.total_days:
            return LeaveResult(
                Outcome.INSUFFICIENT_BALANCE,
                f"Insufficient {request.leave_type} leave balance. "
                f"Requested: {request.total_days} day(s), Available: {available} day(s).",
                leave_id=leave_id,
                remaining=available,
            )

        updated = self._ledger.deduct(
            request.employee_id, request.leave_type, request.total_days, source_id=leave_id, actor_id=actor_id
        )
        if updated is None:
            return _store_failure(
                f"Failed to update the leave balance for request {leave_id}. "
                f"The request is still {LeaveStatus.PENDING}; please retry.",
                leave_id,
            )

        # Another approval may have deducted since the check above.
        remaining = updated.remaining_for(request.leave_type)
        rewrite = self._requests.rewrite_status(leave_id, LeaveStatus.APPROVED, actor_id=actor_id)
        if rewrite.outcome == RewriteOutcome.REWRITTEN:
            return LeaveResult(
                Outcome.SUCCESS,
                f"Leave request {leave_id} approved.\n"
                f"Employee: {request.employee_id}\n"
                f"Type: {request.leave_type.capitalize()}\n"
                f"Days Deducted: {request.total_days}\n"
                f"Remaining Balance: {remaining}",
                leave_id=leave_id,
                remaining=remaining,
            )

        if rewrite.outcome == RewriteOutcome.ALREADY_PROCESSED and rewrite.request is not None:
            detail = f"request {leave_id} had already been {rewrite.request.status} by another operator"
        else:
            detail = f"request {leave_id} could not be marked {LeaveStatus.APPROVED}"
        logger.error(
            "Inconsistent state: %d %s day(s) deducted for employee %s but %s",
            request.total_days,
            request.leave_type,
            request.employee_id,
            detail,
        )
        return LeaveResult(
            Outcome.INCONSISTENT,
            f"Leave balance was deducted ({request.total_days} day(s), {remaining} remaining) but {detail}. "
            "Manual reconciliation is required.",
            leave_id=leave_id,
            remaining=remaining,
        )

    def _reject(self, leave_id: str, actor_id: str | None) -> LeaveResult:
        request = self._requests.get_by_id(leave_id)
        if request is None:
            return LeaveResult(Outcome.NOT_FOUND, f"Leave request {leave_id} not found.", leave_id=leave_id)
        if not request.is_pending:
            return LeaveResult(
                Outcome.CONFLICT, f"Leave request {leave_id} is already {request.status}.", leave_id=leave_id
            )

        rewrite = self._requests.rewrite_status(leave_id, LeaveStatus.REJECTED, actor_id=actor_id)
        if rewrite.outcome == RewriteOutcome.REWRITTEN:
            return LeaveResult(Outcome.SUCCESS, f"Leave request {leave_id} rejected.", leave_id=leave_id)
        if rewrite.outcome == RewriteOutcome.ALREADY_PROCESSED and rewrite.request is not None:
            return LeaveResult(
                Outcome.CONFLICT,
                f"Leave request {leave_id} is already {rewrite.request.status}.",
                leave_id=leave_id,
            )
        if rewrite.outcome == RewriteOutcome.NOT_FOUND:
            return LeaveResult(Outcome.NOT_FOUND, f"Leave request {leave_id} not found.", leave_id=leave_id)
        return _store_failure(f"Failed to reject leave request {leave_id}. Please try again.", leave_id)

    # -----------------------------------------------------------------------
    # Year rollover
    # -----------------------------------------------------------------------

    def check_and_reset_year(self, employee_id: str) -> bool:
        """Make sure the employee has a current-year balance. False if the store failed."""
        try:
            self._ledger.ensure_current_year(employee_id)
        except StoreError:
            logger.exception("Failed to check leave balance year for employee %s", employee_id)
            return False
        return True
