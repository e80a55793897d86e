from fastapi import APIRouter

from leavedesk.api.hr import hr_router
from leavedesk.api.leaves import employee_leaves_router
from leavedesk.api.reports import reports_router

api_router = APIRouter()
api_router.include_router(employee_leaves_router)
api_router.include_router(hr_router)
api_router.include_router(reports_router)
