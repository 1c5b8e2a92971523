# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
ReliefConnect Coordination Service
==================================
Disaster-relief coordination backend: incident reporting, resource tracking,
volunteer management, team building and shift scheduling.

Layered architecture:
    controllers ─► services ─► repositories ─► database

Every team write passes the composition rules first:
    name ─► members ─► leader designated ─► leader is a member

Port: 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from reliefconnect.controllers import (
    dashboard_controller,
    incident_controller,
    resource_controller,
    shift_controller,
    skill_controller,
    system_controller,
    team_controller,
    volunteer_controller,
)
from reliefconnect.core.config import settings
from reliefconnect.core.database import engine
from reliefconnect.core.dependencies import get_incident_service, get_skill_service
from reliefconnect.core.logging import get_logger
from reliefconnect.core.schema import create_all
from reliefconnect.middleware import MetricsMiddleware, RequestIDMiddleware
from reliefconnect.schemas import ErrorResponse

logger = get_logger("reliefconnect")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    try:
        create_all(engine)
        if settings.SEED_DEFAULT_SKILLS:
            get_skill_service().seed_defaults()
        get_incident_service().seed_gauges()
        logger.info("Schema ready, skill catalog and gauges loaded")
    except SQLAlchemyError:
        logger.warning("Could not prepare schema, DB may not be ready yet")
    yield
    engine.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="ReliefConnect Coordination Service",
    description="Incidents, resources, volunteers, teams and shifts for disaster relief.",
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


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Data store failure on %s %s", request.method, request.url.path)
    body = ErrorResponse(error="store_unavailable",
                         detail="The data store is unavailable, try again later")
    return JSONResponse(status_code=503, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    body = ErrorResponse(error="internal_server_error", detail=str(exc))
    return JSONResponse(status_code=500, content=body.model_dump())


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(incident_controller.router)
app.include_router(resource_controller.router)
app.include_router(skill_controller.router)
app.include_router(volunteer_controller.router)
app.include_router(team_controller.router)
app.include_router(shift_controller.router)
app.include_router(dashboard_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
