# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from leavedesk.models.base import parse_timestamp
from leavedesk.models.enums import LeaveStatus, LeaveType

if TYPE_CHECKING:
    from leavedesk.store.base import Document


class LeaveRequest(BaseModel):
    """An employee's leave application and its approval state.

    Dates are kept as the ``YYYY-MM-DD`` strings the employee submitted; they
    are checked for shape, not for calendar correctness.
    """

    id: str
    employee_id: str
    leave_type: LeaveType
    start_date: str
    end_date: str
    total_days: int
    reason: str
    status: LeaveStatus
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> LeaveRequest:
        fields = document.fields
        return cls(
            id=document.id,
            employee_id=fields["employee_id"],
            leave_type=LeaveType(str(fields["leave_type"]).lower()),
            start_date=fields["start_date"],
            end_date=fields["end_date"],
            total_days=fields["total_days"],
            reason=fields.get("reason", ""),
            status=LeaveStatus(fields["status"]),
            created_at=parse_timestamp(fields["created_at"]),
        )

    def to_fields(self) -> dict[str, Any]:
        return {
            "leave_id": self.id,
            "employee_id": self.employee_id,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "total_days": self.total_days,
            "reason": self.reason,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING
