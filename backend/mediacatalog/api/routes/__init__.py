"""API route registration."""

from fastapi import APIRouter

from mediacatalog.api.routes import add, delete, health, scan, search, stats

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(scan.router, prefix="/scan", tags=["scan"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_router.include_router(delete.router, prefix="/delete", tags=["delete"])
api_router.include_router(add.router, prefix="/add", tags=["add"])
