from fastapi import APIRouter

from app.api.routes import health, key_results, objectives

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(objectives.router, prefix="/objectives", tags=["objectives"])
api_router.include_router(key_results.router, prefix="/key-results", tags=["key-results"])
