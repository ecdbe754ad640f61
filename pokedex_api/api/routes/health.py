import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pokedex_api.config import Settings, get_settings
from pokedex_api.database import get_db
from pokedex_api.enums import DatabaseHealth, HealthStatus
from pokedex_api.models.core import Pokemon
from pokedex_api.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
def health(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    started = time.perf_counter()
    try:
        db.execute(select(Pokemon.pokemon_id).limit(1))
        database = DatabaseHealth.healthy
    except SQLAlchemyError as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        db.rollback()
        database = DatabaseHealth.unhealthy

    healthy = database is DatabaseHealth.healthy
    body = HealthResponse(
        status=HealthStatus.ok.value if healthy else HealthStatus.degraded.value,
        service=settings.service_name,
        database=database.value,
        checked_at=datetime.now(UTC),
        latency_ms=int((time.perf_counter() - started) * 1000),
    )
    if healthy:
        return body
    return JSONResponse(status_code=503, content=body.model_dump(mode="json", by_alias=True))
