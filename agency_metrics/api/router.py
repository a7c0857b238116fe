"""Top-level API router."""

from fastapi import APIRouter

from agency_metrics.api.routes.health import router as health_router
from agency_metrics.api.routes.projects import router as projects_router
from agency_metrics.api.routes.reports import router as reports_router
from agency_metrics.api.routes.tasks import router as tasks_router
from agency_metrics.api.routes.workload import router as workload_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(projects_router)
api_router.include_router(tasks_router)
api_router.include_router(reports_router)
api_router.include_router(workload_router)
