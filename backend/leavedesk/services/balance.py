"""Balance ledger: one LeaveBalance document per employee per calendar year.

Every edit is a delete followed by a create under the same id, because the
document store has no partial update. Between those two calls the balance does
not exist; readers that land in that window see "no balance" and recreate it
at full allocation only if the create has not landed yet (the create then
reports the id as taken and the stored copy wins).
"""

from __future__ import annotations

import hashlib
import logging
from datetime import date
from typing import TYPE_CHECKING

from leavedesk.models.balance import BalanceView, LeaveBalance
from leavedesk.models.enums import AuditAction, AuditEntityType, Collection
from leavedesk.services.documents import parse_document, parse_documents
from leavedesk.store.base import DocumentExistsError, StoreError

if TYPE_CHECKING:
    from collections.abc import Callable

    from leavedesk.models.enums import LeaveType
    from leavedesk.services.audit import AuditTrail
    from leavedesk.store.base import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_ALLOCATION_DAYS = 10
DEFAULT_ID_DIGEST_LENGTH = 16


class BalanceLedger:
    """Owns LeaveBalance documents: yearly rollover and deductions."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        allocation_days: int = DEFAULT_ALLOCATION_DAYS,
        id_digest_length: int = DEFAULT_ID_DIGEST_LENGTH,
        today: Callable[[], date] = date.today,
        audit: AuditTrail | None = None,
    ) -> None:
        self._store = store
        self._allocation_days = allocation_days
        self._id_digest_length = id_digest_length
        self._today = today
        self._audit = audit

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def current_year(self) -> int:
        return self._today().year

    def balance_id(self, employee_id: str, year: int) -> str:
        """Document id for an employee's balance in a given year: ``lb_<digest>_<year>``.

        The digest covers the whole employee id, which is free-form and may hold
        characters a document id cannot.
        """
        digest = hashlib.sha256(employee_id.encode("utf-8")).hexdigest()
        return f"lb_{digest[: self._id_digest_length]}_{year}"

    def _records_for(self, employee_id: str) -> list[LeaveBalance]:
        # No point query by field: scan the collection and filter in memory.
        balances = parse_documents(
            LeaveBalance.from_document, self._store.scan(Collection.LEAVE_BALANCE), Collection.LEAVE_BALANCE
        )
        return [balance for balance in balances if balance.employee_id == employee_id]

    def _audit_record(
        self,
        action: AuditAction,
        balance: LeaveBalance,
        *,
        before: LeaveBalance | None = None,
        source_id: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(
            entity_type=AuditEntityType.LEAVE_BALANCE,
            entity_id=balance.id,
            action=action,
            actor_id=actor_id,
            source_id=source_id,
            before=before.to_fields() if before is not None else None,
            after=balance.to_fields(),
        )

    def _create_fresh(self, employee_id: str, year: int, *, replaces: LeaveBalance | None = None) -> LeaveBalance:
        """Create a full-allocation balance, adopting one a concurrent caller already created."""
        balance = LeaveBalance.full_allocation(
            self.balance_id(employee_id, year), employee_id, year, self._allocation_days
        )
        try:
            self._store.create(Collection.LEAVE_BALANCE, balance.id, balance.to_fields())
        except DocumentExistsError:
            document = self._store.get(Collection.LEAVE_BALANCE, balance.id)
            if document is None:
                raise
            existing = parse_document(LeaveBalance.from_document, document, Collection.LEAVE_BALANCE)
            if existing.employee_id != employee_id:
                msg = f"Leave balance id {balance.id} already belongs to employee {existing.employee_id}"
                raise StoreError(msg, collection=Collection.LEAVE_BALANCE, doc_id=balance.id) from None
            logger.info("Leave balance %s was created concurrently; using the stored copy", balance.id)
            return existing

        if replaces is None:
            logger.info("Created leave balance %s for employee %s", balance.id, employee_id)
            self._audit_record(AuditAction.CREATE, balance)
        else:
            logger.info(
                "Reset leave balance for employee %s: %s (year %d) -> %s (year %d)",
                employee_id,
                replaces.id,
                replaces.year,
                balance.id,
                balance.year,
            )
            self._audit_record(AuditAction.RESET, balance, before=replaces)
        return balance

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def ensure_current_year(self, employee_id: str) -> LeaveBalance:
        """Return the employee's balance for the current year, creating or resetting it as needed.

        - No record: create one at full allocation.
        - Record for an earlier (or later) year: delete it, then create the
          current-year record at full allocation.
        - Current-year record: returned untouched. Stray records for other
          years left behind by an interrupted reset are deleted.

        Raises StoreError if the store fails part-way.
        """
        year = self.current_year()
        records = self._records_for(employee_id)
        current = [b for b in records if b.year == year]
        stale = [b for b in records if b.year != year]

        if current:
            for old in stale:
                logger.warning(
                    "Removing stray leave balance %s (year %d) for employee %s", old.id, old.year, employee_id
                )
                self._store.delete(Collection.LEAVE_BALANCE, old.id)
            return current[0]

        if stale:
            logger.info("New year detected for employee %s; resetting leave balance", employee_id)
            for old in stale:
                self._store.delete(Collection.LEAVE_BALANCE, old.id)
            return self._create_fresh(employee_id, year, replaces=stale[0])

        logger.info("No leave balance found for employee %s; creating one", employee_id)
        return self._create_fresh(employee_id, year)

    def open_for_hire(self, employee_id: str) -> LeaveBalance:
        """Open a new hire's balance at full allocation for the current year."""
        return self.ensure_current_year(employee_id)

    def find(self, employee_id: str) -> LeaveBalance | None:
        """Read the employee's balance without creating or resetting anything."""
        records = self._records_for(employee_id)
        if not records:
            return None
        return max(records, key=lambda b: b.year)

    def list_balances(self) -> list[LeaveBalance]:
        """Every stored balance record, ordered by employee then year."""
        balances = parse_documents(
            LeaveBalance.from_document, self._store.scan(Collection.LEAVE_BALANCE), Collection.LEAVE_BALANCE
        )
        return sorted(balances, key=lambda b: (b.employee_id, b.year))

    def remaining(self, employee_id: str) -> BalanceView:
        """Remaining days per leave type for the current year."""
        return self.ensure_current_year(employee_id).view()

    def deduct(
        self,
        employee_id: str,
        leave_type: LeaveType,
        days: int,
        *,
        source_id: str | None = None,
        actor_id: str | None = None,
    ) -> LeaveBalance | None:
        """Subtract ``days`` from one leave type and rewrite the balance document.

        Not a guard: callers check that enough days remain first. The result is
        floored at zero. Returns the balance as rewritten, or None if any store
        call fails; if the delete
        went through but the create did not, the balance is absent until the
        next ``ensure_current_year`` recreates it.
        """
        if days <= 0:
            msg = f"days must be positive, got {days}"
            raise ValueError(msg)

        try:
            balance = self.ensure_current_year(employee_id)
            before = balance.remaining_for(leave_type)
            after = before - days
            if after < 0:
                logger.warning(
                    "Deducting %d %s day(s) from %s would go below zero (%d remaining); flooring at 0",
                    days,
                    leave_type,
                    balance.id,
                    before,
                )
                after = 0
            updated = balance.with_remaining(leave_type, after)
            self._store.delete(Collection.LEAVE_BALANCE, balance.id)
            self._store.create(Collection.LEAVE_BALANCE, updated.id, updated.to_fields())
        except StoreError:
            logger.exception("Failed to deduct %d %s day(s) for employee %s", days, leave_type, employee_id)
            return None

        logger.info("Deducted %d %s day(s) from %s: %d -> %d", days, leave_type, updated.id, before, after)
        self._audit_record(AuditAction.DEDUCT, updated, before=balance, source_id=source_id, actor_id=actor_id)
        return updated
