"""Service health: database reachability and the stored state snapshot."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from paylevel import __version__
from paylevel.api.dependencies import DbSession, Store
from paylevel.models import StateSnapshot
from paylevel.services.migration import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health of the API and of the state it serves.

    ``stored_schema_version`` is None when nothing has been saved yet for
    ``state_key``; ``status`` is ``degraded`` when the database cannot be
    queried or the stored snapshot predates the current schema.
    """

    status: str
    version: str
    timestamp: datetime
    database: str
    state_key: str
    stored_schema_version: int | None = None
    schema_version: int = CURRENT_SCHEMA_VERSION


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession, store: Store) -> HealthResponse:
    """Check the database and report the stored snapshot version."""
    stored_version = None
    try:
        stored_version = await db.scalar(
            select(StateSnapshot.schema_version).where(
                StateSnapshot.state_key == store.state_key
            )
        )
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        db_status = "unhealthy"

    outdated = stored_version is not None and stored_version < CURRENT_SCHEMA_VERSION
    return HealthResponse(
        status="healthy" if db_status == "healthy" and not outdated else "degraded",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        state_key=store.state_key,
        stored_schema_version=stored_version,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(store: Store) -> dict[str, str]:
    """Ready once the state store exists (503 before startup completes)."""
    return {"status": "ready", "state_key": store.state_key}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive", "version": __version__}
