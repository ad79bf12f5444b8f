"""
Job Board Analytics - Main Application

FastAPI backend serving the analytics and report dashboards:
- PostgreSQL (via SQLAlchemy) as the source of all numbers
- JWT bearer tokens issued by the job board app
- Reports recomputed on every request, nothing cached

Run: uvicorn jobboard.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard.api import api_router
from jobboard.core.config import get_settings
from jobboard.db.postgres import test_postgres_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Board Analytics",
    description="""
    Analytics and reporting API for the job board.

    ## Features
    - **Reports**: Period-over-period comparison, status breakdown and trend projection
    - **Job seekers**: Application stats and response times
    - **Employers**: Applications, views, top jobs and time to hire
    - **Admins**: Platform growth figures
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
def health_check():
    """Health check with database connectivity."""
    connected = test_postgres_connection()
    if not connected:
        logger.warning("Health check: database unreachable")
    return {
        "status": "healthy" if connected else "degraded",
        "database": "connected" if connected else "disconnected"
    }
