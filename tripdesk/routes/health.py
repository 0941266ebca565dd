"""
TripDesk Backend — Health Check Route
=======================================

What:  GET /health for container probes and uptime monitors.
How:   Runs SELECT 1 against the application's engine and reads the applied
       Alembic revision. No authentication.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tripdesk import __version__
from tripdesk.schema import schema_revision
from tripdesk.schemas.registration import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    engine = request.app.state.database.engine
    db_status = "connected"
    overall = "healthy"
    revision = None

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        revision = await schema_revision(engine)
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    response.headers["Cache-Control"] = "no-store"
    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        schema_revision=revision,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
