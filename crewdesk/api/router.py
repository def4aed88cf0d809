"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from crewdesk.api.auth import router as auth_router
from crewdesk.api.companies import router as companies_router
from crewdesk.api.ships import router as ships_router
from crewdesk.api.users import router as users_router
from crewdesk.api.certificates import router as certificates_router
from crewdesk.api.incidents import router as incidents_router
from crewdesk.api.assessments import router as assessments_router
from crewdesk.api.activity import router as activity_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(companies_router)
api_router.include_router(ships_router)
api_router.include_router(users_router)
api_router.include_router(certificates_router)
api_router.include_router(incidents_router)
api_router.include_router(assessments_router)
api_router.include_router(activity_router)
