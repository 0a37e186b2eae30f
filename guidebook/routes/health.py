# guidebook/routes/health.py
"""
Health check and metrics endpoints.

Both are public. /health is a liveness probe and does not touch the database.
"""

from fastapi import APIRouter, Response

from ..core.constants import API_VERSION, BRAND_NAME
from ..monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "service": f"{BRAND_NAME.lower()}-api", "version": API_VERSION}


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
