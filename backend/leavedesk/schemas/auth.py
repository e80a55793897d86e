from __future__ import annotations

from pydantic import BaseModel

from leavedesk.models.enums import Role


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: str
    role: Role = Role.EMPLOYEE

    @property
    def is_hr(self) -> bool:
        return self.role == Role.HR
