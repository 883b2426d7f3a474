"""
Health check router.

Liveness plus a database check. The endpoint always answers 200 so load
balancers can tell a running process from a dead one; `status` is
"degraded" when the database cannot be reached.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tradevault.core.config import settings
from tradevault.interfaces.dependencies import get_engine
from tradevault.interfaces.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _database_reachable(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", type(exc).__name__)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application status, version and database reachability.",
)
def health_check(engine: Engine = Depends(get_engine)) -> HealthResponse:
    database_ok = _database_reachable(engine)
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        version=settings.version,
        database="up" if database_ok else "down",
    )
