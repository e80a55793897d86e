# ruff: noqa: B008, TC001
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Path, Request, status

from leavedesk.exceptions import AppError
from leavedesk.models.enums import Role
from leavedesk.schemas.auth import AuthContext
from leavedesk.services.desk import LeaveDesk


async def get_auth_context(
    x_user_id: str = Header(min_length=1),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_hr(
    auth: AuthDep,
) -> AuthContext:
    """Require the HR role for the request."""
    if not auth.is_hr:
        raise AppError("HR access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


HRDep = Annotated[AuthContext, Depends(require_hr)]


async def require_self_or_hr(
    employee_id: str = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Employees may only act on their own id; HR may act on anyone."""
    if not auth.is_hr and employee_id != auth.user_id:
        raise AppError("Employees may only access their own leave records", status_code=status.HTTP_403_FORBIDDEN)
    return auth


async def get_desk(request: Request) -> LeaveDesk:
    """Return the leave desk built for this application instance."""
    return request.app.state.desk


DeskDep = Annotated[LeaveDesk, Depends(get_desk)]
