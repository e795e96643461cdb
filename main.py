# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
GearGuard Maintenance API
=========================
Maintenance requests against equipment, routed to maintenance teams.

Request lifecycle:
    NEW ─► IN_PROGRESS ─► REPAIRED
    NEW ─► IN_PROGRESS ─► SCRAP   (equipment becomes SCRAPPED)

Only members of the owning team may start work on or be assigned to a
team-owned request.

Port: 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from gearguard.controllers import (
    equipment_controller,
    request_controller,
    system_controller,
    team_controller,
    user_controller,
)
from gearguard.core.config import settings
from gearguard.core.database import engine, init_schema
from gearguard.core.dependencies import get_request_service
from gearguard.core.errors import GearGuardError
from gearguard.core.logging import get_logger
from gearguard.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger("gearguard")


@asynccontextmanager
async def lifespan(application: FastAPI):
    try:
        if settings.AUTO_CREATE_SCHEMA:
            init_schema(engine)
        get_request_service().seed_gauges()
    except SQLAlchemyError:
        logger.warning("Could not seed gauges, DB may not be ready yet")
    yield
    engine.dispose()
    logger.info("Shutting down, connection pool disposed")


app = FastAPI(
    title="GearGuard Maintenance API",
    description="Maintenance request lifecycle and team-based work authorization.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(GearGuardError)
async def gearguard_error_handler(request: Request, exc: GearGuardError):
    req_id = getattr(request.state, "request_id", None)
    logger.info("%s %s rejected (%s): %s",
                request.method, request.url.path, exc.kind.value, exc.detail,
                extra={"request_id": req_id})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind.value, "detail": exc.detail},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(request_controller.router)
app.include_router(team_controller.router)
app.include_router(equipment_controller.router)
app.include_router(user_controller.router)
