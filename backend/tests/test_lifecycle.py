"""Tests for the leave lifecycle: apply, approve, reject and year rollover.

Exercised through the LeaveDesk facade so the wiring is covered as well.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest

from leavedesk.models.enums import AuditAction, Collection, LeaveErrorCode, LeaveStatus, LeaveType, Outcome
from leavedesk.services.desk import LeaveDesk
from leavedesk.services.lifecycle import StripedLocks, parse_date_parts, parse_leave_type

if TYPE_CHECKING:
    from leavedesk.config import Settings
    from tests.conftest import Clock, FlakyDocumentStore


def _seed_balance(store: FlakyDocumentStore, employee_id: str, year: int, **counts: int) -> str:
    balance_id = f"lb_{employee_id[:8]}_{year}"
    store.seed(
        Collection.LEAVE_BALANCE,
        balance_id,
        {
            "leave_balance_id": balance_id,
            "employee_id": employee_id,
            "year": year,
            "annual_leave": counts.get("annual", 10),
            "emergency_leave": counts.get("emergency", 10),
            "medical_leave": counts.get("medical", 10),
        },
    )
    return balance_id


def _apply(desk: LeaveDesk, employee_id: str = "E1", **overrides: object) -> str:
    values: dict = {
        "leave_type": "medical",
        "start_date": "2024-03-01",
        "end_date": "2024-03-03",
        "total_days": 3,
        "reason": "flu",
    }
    values.update(overrides)
    result = desk.apply_leave(
        employee_id,
        values["leave_type"],
        values["start_date"],
        values["end_date"],
        values["total_days"],
        values["reason"],
    )
    assert result.outcome == Outcome.SUCCESS, result.message
    assert result.leave_id is not None
    return result.leave_id


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("annual", LeaveType.ANNUAL),
        ("Medical", LeaveType.MEDICAL),
        (" EMERGENCY ", LeaveType.EMERGENCY),
        ("sick", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_leave_type(value: str | None, expected: LeaveType | None) -> None:
    assert parse_leave_type(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-03-01", (2024, 3, 1)),
        ("2024-02-31", (2024, 2, 31)),
        ("2024-13-01", None),
        ("2024-00-10", None),
        ("2024-01-32", None),
        ("1899-12-31", None),
        ("2101-01-01", None),
        ("24-03-01", None),
        ("2024/03/01", None),
        ("2024-3-1", None),
    ],
)
def test_parse_date_parts(value: str, expected: tuple[int, int, int] | None) -> None:
    assert parse_date_parts(value) == expected


def test_striped_locks_are_reusable() -> None:
    locks = StripedLocks(stripes=4)
    for _ in range(3):
        with locks.hold("E1"):
            pass


# ---------------------------------------------------------------------------
# apply
# ---------------------------------------------------------------------------


def test_apply_stores_pending_with_supplied_days(desk: LeaveDesk) -> None:
    leave_id = _apply(desk, total_days=5)

    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.PENDING
    assert request.total_days == 5
    assert request.leave_type == LeaveType.MEDICAL


def test_apply_message_names_the_leave(desk: LeaveDesk) -> None:
    result = desk.apply_leave("E1", "annual", "2026-12-01", "2026-12-01", 1, "errand")
    assert result.ok
    assert result.message == (
        "Leave application submitted successfully!\n"
        f"Leave ID: {result.leave_id}\n"
        "Status: Pending (awaiting HR approval)"
    )


def test_apply_does_not_touch_balance(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _apply(desk)
    assert store.scan(Collection.LEAVE_BALANCE) == []


@pytest.mark.parametrize(
    ("overrides", "code"),
    [
        ({"leave_type": "vacation"}, LeaveErrorCode.INVALID_LEAVE_TYPE),
        ({"leave_type": None}, LeaveErrorCode.INVALID_LEAVE_TYPE),
        ({"start_date": ""}, LeaveErrorCode.MISSING_START_DATE),
        ({"start_date": None}, LeaveErrorCode.MISSING_START_DATE),
        ({"end_date": "   "}, LeaveErrorCode.MISSING_END_DATE),
        ({"start_date": "2024-13-01"}, LeaveErrorCode.MALFORMED_START_DATE),
        ({"end_date": "03/03/2024"}, LeaveErrorCode.MALFORMED_END_DATE),
        ({"start_date": "2024-03-05", "end_date": "2024-03-01"}, LeaveErrorCode.END_BEFORE_START),
        ({"total_days": 0}, LeaveErrorCode.NON_POSITIVE_DAYS),
        ({"total_days": -2}, LeaveErrorCode.NON_POSITIVE_DAYS),
        ({"reason": "  "}, LeaveErrorCode.BLANK_REASON),
        ({"reason": None}, LeaveErrorCode.BLANK_REASON),
        ({"reason": "x" * 1001}, LeaveErrorCode.REASON_TOO_LONG),
    ],
)
def test_apply_validation(desk: LeaveDesk, store: FlakyDocumentStore, overrides: dict, code: LeaveErrorCode) -> None:
    values: dict = {
        "leave_type": "medical",
        "start_date": "2024-03-01",
        "end_date": "2024-03-03",
        "total_days": 3,
        "reason": "flu",
    }
    values.update(overrides)

    result = desk.apply_leave("E1", **values)

    assert result.outcome == Outcome.VALIDATION_ERROR
    assert result.error_code == code
    assert result.leave_id is None
    assert store.scan(Collection.LEAVE_REQUEST) == []


def test_apply_reports_first_failing_check(desk: LeaveDesk) -> None:
    result = desk.apply_leave("E1", "vacation", "", "bad", 0, "")
    assert result.error_code == LeaveErrorCode.INVALID_LEAVE_TYPE


def test_apply_accepts_reason_at_length_limit(desk: LeaveDesk) -> None:
    leave_id = _apply(desk, "E1", reason="x" * 1000)
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert len(request.reason) == 1000


def test_apply_single_day(desk: LeaveDesk) -> None:
    leave_id = _apply(desk, start_date="2024-03-01", end_date="2024-03-01", total_days=1)
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.total_days == 1


def test_apply_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("create", Collection.LEAVE_REQUEST)
    result = desk.apply_leave("E1", "annual", "2026-01-05", "2026-01-06", 2, "trip")
    assert result.outcome == Outcome.STORE_FAILURE
    assert result.message.startswith("Failed to submit leave application")


# ---------------------------------------------------------------------------
# approve
# ---------------------------------------------------------------------------


def test_e1_medical_leave_approved_once(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026, medical=10)
    leave_id = _apply(desk, "E1")

    result = desk.approve_leave(leave_id, actor_id="hr-1")

    assert result.outcome == Outcome.SUCCESS
    assert "Remaining Balance: 7" in result.message
    assert "Days Deducted: 3" in result.message
    assert result.remaining == 7
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.APPROVED

    again = desk.approve_leave(leave_id)

    assert again.outcome == Outcome.CONFLICT
    assert "already Approved" in again.message
    assert desk.get_leave_balance_data("E1") is not None
    assert desk.ledger.remaining("E1").medical == 7


def test_approve_refuses_when_insufficient(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026, annual=4)
    leave_id = _apply(desk, "E1", leave_type="annual", total_days=5)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.INSUFFICIENT_BALANCE
    assert result.message == "Insufficient annual leave balance. Requested: 5 day(s), Available: 4 day(s)."
    assert desk.ledger.remaining("E1").annual == 4
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.PENDING


def test_approve_exact_remaining_reaches_zero(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026, emergency=2)
    leave_id = _apply(desk, "E1", leave_type="emergency", total_days=2)

    result = desk.approve_leave(leave_id)

    assert result.ok
    assert result.remaining == 0
    assert desk.ledger.remaining("E1").emergency == 0


def test_approve_unknown_request(desk: LeaveDesk) -> None:
    result = desk.approve_leave("leave_missing")
    assert result.outcome == Outcome.NOT_FOUND
    assert result.message == "Leave request leave_missing not found."


def test_approve_creates_missing_balance(desk: LeaveDesk) -> None:
    leave_id = _apply(desk, "E7")
    result = desk.approve_leave(leave_id)
    assert result.ok
    assert desk.ledger.remaining("E7").medical == 7


def test_approve_resets_stale_balance_before_charging(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    leave_id = _apply(desk, "E1")
    _seed_balance(store, "E1", 2025, medical=1)

    result = desk.approve_leave(leave_id)

    assert result.ok
    assert result.remaining == 7
    assert [b.year for b in desk.ledger.list_balances()] == [2026]


def test_approve_deduct_failure_keeps_request_pending(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026)
    leave_id = _apply(desk, "E1")
    store.fail("delete", Collection.LEAVE_BALANCE)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.STORE_FAILURE
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.PENDING
    assert desk.ledger.remaining("E1").medical == 10


def test_approve_read_failure_is_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    leave_id = _apply(desk, "E1")
    store.fail("get", Collection.LEAVE_REQUEST)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.STORE_FAILURE
    assert result.message.startswith("Failed to approve")


def test_approve_rewrite_failure_is_inconsistent(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026)
    leave_id = _apply(desk, "E1")
    store.fail("delete", Collection.LEAVE_REQUEST)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.INCONSISTENT
    assert "Manual reconciliation is required" in result.message
    assert desk.ledger.remaining("E1").medical == 7
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.PENDING


def test_approve_lost_race_is_inconsistent(
    desk: LeaveDesk, store: FlakyDocumentStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    _seed_balance(store, "E1", 2026)
    leave_id = _apply(desk, "E1")
    deduct = desk.ledger.deduct

    def _deduct_then_rejected_elsewhere(*args: object, **kwargs: object) -> object:
        updated = deduct(*args, **kwargs)  # type: ignore[arg-type]
        desk.requests.rewrite_status(leave_id, LeaveStatus.REJECTED, actor_id="hr-2")
        return updated

    monkeypatch.setattr(desk.ledger, "deduct", _deduct_then_rejected_elsewhere)

    result = desk.approve_leave(leave_id, actor_id="hr-1")

    assert result.outcome == Outcome.INCONSISTENT
    assert "already been Rejected by another operator" in result.message
    request = desk.requests.get_by_id(leave_id)
    assert request is not None
    assert request.status == LeaveStatus.REJECTED


def test_approve_reports_balance_as_written(
    desk: LeaveDesk, store: FlakyDocumentStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    _seed_balance(store, "E1", 2026, medical=10)
    leave_id = _apply(desk, "E1", total_days=3)
    deduct = desk.ledger.deduct

    def _other_approval_lands_first(*args: object, **kwargs: object) -> object:
        deduct("E1", LeaveType.MEDICAL, 2, source_id="leave_other")
        return deduct(*args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(desk.ledger, "deduct", _other_approval_lands_first)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.SUCCESS
    assert "Remaining Balance: 5" in result.message
    assert result.remaining == 5
    assert desk.ledger.remaining("E1").medical == 5


def test_approve_audit_trail(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026)
    leave_id = _apply(desk, "E1")
    desk.approve_leave(leave_id, actor_id="hr-1")

    [deduct] = desk.audit.entries(action=AuditAction.DEDUCT)
    assert deduct.source_id == leave_id
    assert deduct.actor_id == "hr-1"
    [approve] = desk.audit.entries(action=AuditAction.APPROVE)
    assert approve.entity_id == leave_id


def test_serialized_concurrent_approvals_deduct_once(
    store: FlakyDocumentStore, settings: Settings, clock: Clock
) -> None:
    desk = LeaveDesk(store, settings.model_copy(update={"serialize_decisions": True}), today=clock.today)
    _seed_balance(store, "E1", 2026, annual=10)
    leave_id = _apply(desk, "E1", leave_type="annual", total_days=4)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: desk.approve_leave(leave_id), range(8)))

    outcomes = [r.outcome for r in results]
    assert outcomes.count(Outcome.SUCCESS) == 1
    assert outcomes.count(Outcome.CONFLICT) == 7
    assert desk.ledger.remaining("E1").annual == 6


# ---------------------------------------------------------------------------
# reject
# ---------------------------------------------------------------------------


def test_reject_twice(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026)
    leave_id = _apply(desk, "E1")

    first = desk.reject_leave(leave_id, actor_id="hr-1")
    second = desk.reject_leave(leave_id, actor_id="hr-1")

    assert first.outcome == Outcome.SUCCESS
    assert first.message == f"Leave request {leave_id} rejected."
    assert second.outcome == Outcome.CONFLICT
    assert "already Rejected" in second.message
    assert len(desk.audit.entries(action=AuditAction.REJECT)) == 1
    assert desk.ledger.remaining("E1").total == 30


def test_reject_unknown_request(desk: LeaveDesk) -> None:
    assert desk.reject_leave("leave_missing").outcome == Outcome.NOT_FOUND


def test_approve_after_reject_conflicts(desk: LeaveDesk) -> None:
    leave_id = _apply(desk, "E1")
    desk.reject_leave(leave_id)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.CONFLICT
    assert "already Rejected" in result.message
    assert desk.audit.entries(action=AuditAction.DEDUCT) == []


def test_reject_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    leave_id = _apply(desk, "E1")
    store.fail("create", Collection.LEAVE_REQUEST)

    result = desk.reject_leave(leave_id)

    assert result.outcome == Outcome.STORE_FAILURE


# ---------------------------------------------------------------------------
# Balance queries and year rollover
# ---------------------------------------------------------------------------


def test_e2_missing_balance_is_created_on_read(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    text = desk.get_leave_balance("E2")

    assert "Year            : 2026" in text
    assert "Annual Leave    : 10 days" in text
    assert "Emergency Leave : 10 days" in text
    assert "Medical Leave   : 10 days" in text
    assert "Total Remaining : 30 days" in text
    stored = store.get(Collection.LEAVE_BALANCE, desk.ledger.balance_id("E2", 2026))
    assert stored is not None
    assert stored.fields["medical_leave"] == 10


def test_e3_stale_year_is_reset(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    old_id = _seed_balance(store, "E3", 2024, annual=2, emergency=5, medical=0)

    assert desk.check_and_reset_leave_balance("E3") is True

    assert store.get(Collection.LEAVE_BALANCE, old_id) is None
    stored = store.get(Collection.LEAVE_BALANCE, desk.ledger.balance_id("E3", 2026))
    assert stored is not None
    assert (stored.fields["annual_leave"], stored.fields["emergency_leave"], stored.fields["medical_leave"]) == (
        10,
        10,
        10,
    )


def test_check_and_reset_reports_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("scan", Collection.LEAVE_BALANCE)
    assert desk.check_and_reset_leave_balance("E3") is False


def test_balance_data(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    _seed_balance(store, "E1", 2026, annual=3, emergency=1, medical=8)
    view = desk.get_leave_balance_data("E1")
    assert view is not None
    assert (view.annual, view.emergency, view.medical, view.total) == (3, 1, 8, 12)


def test_balance_data_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("scan", Collection.LEAVE_BALANCE)
    assert desk.get_leave_balance_data("E1") is None


def test_balance_text_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("scan", Collection.LEAVE_BALANCE)
    assert desk.get_leave_balance("E1") == "Failed to get leave balance."


def test_employees_sharing_leading_characters_get_separate_balances(desk: LeaveDesk) -> None:
    assert "Total Remaining : 30 days" in desk.get_leave_balance("employee-1")
    leave_id = _apply(desk, "employee-2", total_days=4)

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.SUCCESS, result.message
    assert result.remaining == 6
    assert "Medical Leave   : 10 days" in desk.get_leave_balance("employee-1")
    assert "Medical Leave   : 6 days" in desk.get_leave_balance("employee-2")


def test_open_leave_balance(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    result = desk.open_leave_balance("E8")
    assert result.ok
    assert desk.ledger.balance_id("E8", 2026) in result.message
    again = desk.open_leave_balance("E8")
    assert again.ok
    assert len(store.scan(Collection.LEAVE_BALANCE)) == 1


def test_open_leave_balance_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("create", Collection.LEAVE_BALANCE)
    assert desk.open_leave_balance("E8").outcome == Outcome.STORE_FAILURE


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def test_leave_history_listing(desk: LeaveDesk) -> None:
    first = _apply(desk, "E1")
    second = _apply(desk, "E1", leave_type="Annual", reason="trip")
    _apply(desk, "E2")
    desk.reject_leave(first)

    text = desk.get_leaves_by_employee("E1")

    assert "MY LEAVE HISTORY" in text
    assert text.index(first) < text.index(second)
    assert "Status      : Rejected" in text
    assert "Type        : Annual" in text
    assert "Employee    :" not in text


def test_leave_history_empty(desk: LeaveDesk) -> None:
    assert "No leave applications found." in desk.get_leaves_by_employee("E1")


def test_leave_history_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("scan", Collection.LEAVE_REQUEST)
    assert desk.get_leaves_by_employee("E1") == "Failed to get leave history."


def test_pending_listing(desk: LeaveDesk) -> None:
    pending = _apply(desk, "E1")
    decided = _apply(desk, "E2")
    desk.reject_leave(decided)

    text = desk.get_all_pending_leaves()

    assert "Total Pending: 1" in text
    assert pending in text
    assert decided not in text
    assert "Employee    : E1" in text


def test_pending_listing_store_failure(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.fail("scan", Collection.LEAVE_REQUEST)
    assert desk.get_all_pending_leaves() == "Failed to get pending leave requests."


# ---------------------------------------------------------------------------
# Malformed documents
# ---------------------------------------------------------------------------


def test_malformed_balance_document_does_not_block_other_employees(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    store.seed(Collection.LEAVE_BALANCE, "lb_X_2026", {"userid": "X", "year": "2026", "annual_leave": 10})
    leave_id = _apply(desk, "E1")

    result = desk.approve_leave(leave_id)

    assert result.outcome == Outcome.SUCCESS, result.message
    assert "Medical Leave   : 7 days" in desk.get_leave_balance("E1")
    assert store.get(Collection.LEAVE_BALANCE, "lb_X_2026") is not None


@pytest.mark.parametrize("decide", ["approve_leave", "reject_leave"])
def test_malformed_request_document_is_store_failure(desk: LeaveDesk, store: FlakyDocumentStore, decide: str) -> None:
    store.seed(Collection.LEAVE_REQUEST, "leave_broken", {"employee_id": "E1", "status": "Pending"})

    result = getattr(desk, decide)("leave_broken")

    assert result.outcome == Outcome.STORE_FAILURE
    assert result.leave_id == "leave_broken"


def test_listings_skip_malformed_request_documents(desk: LeaveDesk, store: FlakyDocumentStore) -> None:
    leave_id = _apply(desk, "E1")
    store.seed(Collection.LEAVE_REQUEST, "leave_broken", {"employee_id": "E1", "leave_type": "holiday"})

    assert leave_id in desk.get_leaves_by_employee("E1")
    assert "Total Pending: 1" in desk.get_all_pending_leaves()
