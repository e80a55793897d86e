from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from leavedesk.models.enums import LeaveType

if TYPE_CHECKING:
    from leavedesk.store.base import Document

_FIELD_BY_TYPE = {
    LeaveType.ANNUAL: "annual_remaining",
    LeaveType.EMERGENCY: "emergency_remaining",
    LeaveType.MEDICAL: "medical_remaining",
}


class BalanceView(BaseModel):
    """Remaining days per leave type, as returned to callers."""

    annual: int
    emergency: int
    medical: int

    @property
    def total(self) -> int:
        return self.annual + self.emergency + self.medical


class LeaveBalance(BaseModel):
    """Remaining leave days for one employee in one calendar year."""

    id: str
    employee_id: str
    year: int
    annual_remaining: int = Field(ge=0)
    emergency_remaining: int = Field(ge=0)
    medical_remaining: int = Field(ge=0)

    @classmethod
    def full_allocation(cls, balance_id: str, employee_id: str, year: int, allocation_days: int) -> LeaveBalance:
        return cls(
            id=balance_id,
            employee_id=employee_id,
            year=year,
            annual_remaining=allocation_days,
            emergency_remaining=allocation_days,
            medical_remaining=allocation_days,
        )

    @classmethod
    def from_document(cls, document: Document) -> LeaveBalance:
        fields = document.fields
        return cls(
            id=document.id,
            employee_id=fields["employee_id"],
            year=fields["year"],
            annual_remaining=fields.get("annual_leave", 0),
            emergency_remaining=fields.get("emergency_leave", 0),
            medical_remaining=fields.get("medical_leave", 0),
        )

    def to_fields(self) -> dict[str, Any]:
        return {
            "leave_balance_id": self.id,
            "employee_id": self.employee_id,
            "year": self.year,
            "annual_leave": self.annual_remaining,
            "emergency_leave": self.emergency_remaining,
            "medical_leave": self.medical_remaining,
        }

    def remaining_for(self, leave_type: LeaveType) -> int:
        return getattr(self, _FIELD_BY_TYPE[leave_type])

    def with_remaining(self, leave_type: LeaveType, days: int) -> LeaveBalance:
        """Return a copy with one leave type's remaining count replaced."""
        return self.model_copy(update={_FIELD_BY_TYPE[leave_type]: days})

    def view(self) -> BalanceView:
        return BalanceView(
            annual=self.annual_remaining,
            emergency=self.emergency_remaining,
            medical=self.medical_remaining,
        )
