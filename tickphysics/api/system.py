"""System API: liveness and readiness probes, Prometheus metrics and service info."""

from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from tickphysics.config import settings
from tickphysics.database import db_healthcheck

router = APIRouter(tags=["system"])


def _package_version() -> str:
    try:
        return version("tickphysics-tools")
    except PackageNotFoundError:
        return "0.1.0"


@router.get("/health/live")
def liveness():
    return {"status": "ok"}


@router.get("/health/ready")
def readiness():
    if db_healthcheck():
        return {"status": "ready", "db": "ok"}
    return JSONResponse(status_code=503, content={"status": "degraded", "db": "error"})


@router.get("/metrics")
def metrics():
    """Prometheus exposition of the default registry (includes process metrics)."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


@router.get("/api/v1/system/info")
def system_info():
    return {
        "service": settings.project_name,
        "version": _package_version(),
        "db": "ok" if db_healthcheck() else "error",
        "time": datetime.now(timezone.utc).isoformat(),
        "cors_origins": settings.cors_origins,
    }
