"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobboard.api.routes.report_routes import router as report_router
from jobboard.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(report_router)
api_router.include_router(analytics_router)
