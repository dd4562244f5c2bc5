"""
AFC Contests FastAPI Application
Main entry point for the application
"""

import logging
import os
import subprocess
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from afc.core.config import settings
from afc.core.errors import ContestPlatformError
from afc.core.metrics import ACTIVE_CONNECTIONS, REQUEST_COUNT, REQUEST_DURATION

# Sentry integration
if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.celery import CeleryIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            CeleryIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.app_env,
    )

from afc.api.health import router as health_router
from afc.api.v1.contests import router as contests_router
from afc.api.v1.admin_contest import router as admin_contest_router

logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="AFC Contests API",
    description="Creative contests with reactions, winners and prizes",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.on_event("startup")
async def startup_event():
    """Run database migrations on startup when enabled"""
    if not settings.run_migrations_on_startup:
        return
    logger.info("Running database migrations...")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        capture_output=True,
        text=True,
        timeout=60
    )
    if result.returncode == 0:
        logger.info("Database migrations completed successfully")
    else:
        logger.warning(f"Migration warning: {result.stderr}")


@app.exception_handler(ContestPlatformError)
async def contest_platform_error_handler(request: Request, exc: ContestPlatformError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add metrics middleware
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    ACTIVE_CONNECTIONS.inc()
    status_code = 500

    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration = time.time() - start_time
        ACTIVE_CONNECTIONS.dec()

        # Label by route template so ids in the path do not grow the label set
        route = request.scope.get("route")
        endpoint = route.path if route is not None else "unmatched"

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=status_code
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)


# Add metrics endpoint
@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health_router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(contests_router, prefix=settings.api_v1_prefix, tags=["contests"])
app.include_router(admin_contest_router, prefix=f"{settings.api_v1_prefix}/admin", tags=["admin-contest"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "afc.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
