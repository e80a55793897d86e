"""Seed script for development data.

Run with:  python -m leavedesk.seed   (against a running API)
"""

from __future__ import annotations

import sys

import httpx

BASE_URL = "http://localhost:8000"
HR_USER_ID = "hr-admin"

HR_HEADERS = {"X-User-Id": HR_USER_ID, "X-Role": "hr"}

EMPLOYEES = ["emp-alice-0001", "emp-bob-00002", "emp-carol-003"]

LEAVES = [
    {
        "employee_id": "emp-alice-0001",
        "leave_type": "medical",
        "start_date": "2026-03-02",
        "end_date": "2026-03-04",
        "total_days": 3,
        "reason": "flu",
        "decision": "approve",
    },
    {
        "employee_id": "emp-bob-00002",
        "leave_type": "annual",
        "start_date": "2026-07-13",
        "end_date": "2026-07-17",
        "total_days": 5,
        "reason": "Family trip",
        "decision": "reject",
    },
    {
        "employee_id": "emp-carol-003",
        "leave_type": "emergency",
        "start_date": "2026-05-11",
        "end_date": "2026-05-11",
        "total_days": 1,
        "reason": "Burst pipe at home",
        "decision": None,
    },
]


def _employee_headers(employee_id: str) -> dict[str, str]:
    return {"X-User-Id": employee_id, "X-Role": "employee"}


def _report(resp: httpx.Response, label: str) -> dict | None:
    if resp.status_code != 200:
        print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
        return None
    body = resp.json()
    marker = "OK" if body.get("ok") else "SKIP"
    print(f"  [{marker}] {label}: {body['message'].splitlines()[0]}")
    return body


def seed_balances(client: httpx.Client) -> None:
    """Open a current-year balance for each demo employee."""
    print("\n--- Seeding leave balances ---")
    for employee_id in EMPLOYEES:
        resp = client.post(f"{BASE_URL}/hr/employees/{employee_id}/leave-balance", headers=HR_HEADERS)
        _report(resp, employee_id)


def seed_leaves(client: httpx.Client) -> None:
    """Apply for the demo leaves and decide some of them."""
    print("\n--- Seeding leave requests ---")
    for leave in LEAVES:
        employee_id = leave["employee_id"]
        payload = {key: leave[key] for key in ("leave_type", "start_date", "end_date", "total_days", "reason")}
        resp = client.post(
            f"{BASE_URL}/employees/{employee_id}/leaves", json=payload, headers=_employee_headers(employee_id)
        )
        body = _report(resp, f"{employee_id} {leave['leave_type']}")
        if body is None or not body.get("leave_id") or leave["decision"] is None:
            continue
        resp = client.post(f"{BASE_URL}/hr/leaves/{body['leave_id']}/{leave['decision']}", headers=HR_HEADERS)
        _report(resp, f"{leave['decision']} {body['leave_id']}")


def main() -> None:
    print("=" * 60)
    print("  HR Leave Desk - Development Seed Script")
    print("=" * 60)

    with httpx.Client(timeout=30.0) as client:
        try:
            resp = client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running (uvicorn leavedesk.main:app)")
            sys.exit(1)

        seed_balances(client)
        seed_leaves(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
