# clientdb/routers/health.py
"""
Health Check Endpoint

Single liveness/readiness probe used by the orchestrator. Reports 503 as
soon as the database stops answering.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging

from clientdb.database import check_connectivity
from clientdb.schemas.client import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/_health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
def health_check(request: Request):
    """
    Database connectivity probe.

    Returns:
        200 with database "connected", or 503 with database "disconnected"
    """
    engine = getattr(request.app.state, "engine", None)
    timestamp = datetime.now(timezone.utc).isoformat()

    if engine is not None and check_connectivity(engine):
        return HealthResponse(status="ok", database="connected", timestamp=timestamp)

    logger.error("Health check failed: database disconnected")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=HealthResponse(status="error", database="disconnected", timestamp=timestamp).model_dump()
    )
