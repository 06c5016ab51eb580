"""
System status and health API endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hazardmap.core import get_settings, to_iso_utc
from hazardmap.schemas import HealthResponse
from hazardmap.services.hazards import HazardMapState, get_hazard_state

router = APIRouter(tags=["System"])
settings = get_settings()


@router.get(
    "/api/v1/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Check the health of the advisory feed.

Returns overall status:
- `healthy`: Last refresh succeeded
- `degraded`: Last refresh failed or no data has been loaded yet
    """,
)
async def health_check(state: HazardMapState = Depends(get_hazard_state)):
    """Health of the upstream feed and refresh loop."""
    services = {}
    overall_status = "healthy"

    if state.error:
        services["awc"] = {"status": "down", "error": state.error}
        overall_status = "degraded"
    elif state.last_updated is None:
        services["awc"] = {"status": "pending"}
        overall_status = "degraded"
    else:
        services["awc"] = {"status": "up", "last_updated": to_iso_utc(state.last_updated)}

    if settings.auto_refresh_enabled:
        services["refresh"] = {
            "status": "loading" if state.is_loading else "idle",
            "interval": settings.refresh_interval,
        }
    else:
        services["refresh"] = {"status": "disabled"}

    return {
        "status": overall_status,
        "services": services,
        "timestamp": to_iso_utc(datetime.now(timezone.utc)),
    }


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
