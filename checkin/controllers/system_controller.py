# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Operational endpoints: liveness, store readiness, Prometheus scrape."""
from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from checkin import __version__
from checkin.core.config import settings
from checkin.core.dependencies import get_repo
from checkin.core.logging import get_logger
from checkin.repositories.base import VisitorRepository

router = APIRouter(tags=["System"])
logger = get_logger(__name__)


@router.get("/health")
def health_check():
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": __version__}


@router.get("/health/ready")
def readiness_check(repo: VisitorRepository = Depends(get_repo)):
    """Ready once the configured store (database or spreadsheet) answers."""
    try:
        repo.verify_connection()
    except Exception as exc:
        logger.warning("Readiness check failed backend=%s: %s", repo.backend, exc)
        raise HTTPException(status_code=503, detail="Store unavailable")
    return {"status": "ok", "store": "connected", "backend": repo.backend}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
