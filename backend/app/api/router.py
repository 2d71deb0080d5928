from fastapi import APIRouter

from app.api.contributions import router as contributions_router
from app.api.health import router as health_router
from app.api.startups import router as startups_router
from app.api.tasks import router as tasks_router
from app.api.team import router as team_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(startups_router)
api_router.include_router(team_router)
api_router.include_router(tasks_router)
api_router.include_router(contributions_router)
