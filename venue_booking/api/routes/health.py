# venue_booking/api/routes/health.py

from datetime import datetime, timezone
import logging
import time

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venue_booking.api.dependencies import get_container
from venue_booking.api.responses import failure, ok
from venue_booking.api.security import enforce_policy
from venue_booking.application.container import ServiceContainer
from venue_booking.infrastructure.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"], dependencies=[Depends(enforce_policy)])


@router.get("/health")
def health(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
):
    started = time.perf_counter()
    data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": container.settings.environment,
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Health check failed: database unreachable (%s)", exc)
        data["status"] = "unavailable"
        data["database"] = {"status": "disconnected"}
        return failure(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Service unavailable",
            "service_unavailable",
            data=data,
        )

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    data["status"] = "ok"
    data["database"] = {"status": "connected", "responseTimeMs": elapsed_ms}
    return ok(data, "API is healthy")
