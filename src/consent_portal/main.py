"""
Consent Portal API - Main Application Entry Point

Builds the FastAPI application: logging, startup/shutdown of the database and
the background scheduler, CORS, the /api routes, the 400 handler for malformed
requests and the health and debug endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from consent_portal.api import api_router
from consent_portal.core.config import settings
from consent_portal.core.database import async_session_maker, close_db, init_db
from consent_portal.core.scheduler import (
    list_registered_jobs,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from consent_portal.modules.verification import register_verification_jobs

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


async def _start_background_jobs() -> None:
    register_verification_jobs()
    await start_scheduler()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Connect to the database and start the scheduler; undo both on shutdown.

    Startup failures are fatal in production only, so the API can be run
    locally without a database.
    """
    print(f"Consent Portal API starting ({settings.python_env})")

    for label, step in (("Database", init_db), ("Scheduler", _start_background_jobs)):
        try:
            await step()
            print(f"[OK] {label}")
        except Exception as e:
            print(f"[FAIL] {label}: {e}")
            if settings.is_production:
                raise

    yield

    await stop_scheduler()
    await close_db()
    print("Consent Portal API stopped")


app = FastAPI(
    title="Consent Portal API",
    description="Image Collection Portal - consent, email verification and image submission",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stored images for local inspection; a reverse proxy serves them in production
if settings.serve_uploads:
    settings.images_root.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.images_root), name="uploads")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report missing or malformed request fields as 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "error": "VALIDATION_ERROR",
                "message": "Missing or invalid request fields.",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


async def _ping_database() -> dict[str, Any]:
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        return {"database": "connected"}
    except Exception as e:
        return {"database": "error", "message": str(e)}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "service": "Consent Portal API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """Readiness probe: ready once the database answers."""
    db_status = await _ping_database()
    ready = db_status["database"] == "connected"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "not_ready"},
    )


@app.get("/debug/db", tags=["Debug"])
async def debug_db() -> dict[str, Any]:
    return await _ping_database()


@app.get("/debug/jobs", tags=["Debug"])
async def list_jobs():
    return {"jobs": list_registered_jobs()}


@app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"])
async def trigger_job(job_id: str):
    """Run a background job now (e.g. verification_purge_expired_codes)."""
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
