"""
Hazard advisory API endpoints.

Serves SIGMET and AIR SIGMET polygons from aviationweather.gov, filtered
by altitude band and reference time, for map clients.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from hazardmap.core import (
    get_settings, build_time_window, format_offset_label, format_range_for_display,
    offset_to_instant, to_iso_utc
)
from hazardmap.schemas import (
    AdvisoryListResponse, FilterUpdate, HazardFeaturesResponse, HazardStateResponse,
    TimeWindowResponse
)
from hazardmap.services.hazards import LAYERS, HazardMapState, get_hazard_state

router = APIRouter(prefix="/api/v1/hazards", tags=["Hazards"])
settings = get_settings()


@router.get(
    "/window",
    response_model=TimeWindowResponse,
    summary="Get Time Window",
    description="""
Resolve a time-slider offset into the reference instant and the window
used to query aviationweather.gov.

The window spans from 24 hours before to 6 hours after the reference time.
    """,
)
async def get_time_window(
    offset_hours: float = Query(0, ge=-24, le=6, description="Hours from now"),
):
    """Get the reference time and query window for an offset."""
    target = offset_to_instant(offset_hours)
    start, end = build_time_window(
        target, settings.window_back_hours, settings.window_forward_hours
    )
    return {
        "offset_hours": offset_hours,
        "label": format_offset_label(offset_hours),
        "target_time": to_iso_utc(target),
        "start": to_iso_utc(start),
        "end": to_iso_utc(end),
        "display": format_range_for_display(start, end),
    }


@router.get(
    "/state",
    response_model=HazardStateResponse,
    summary="Get Filter State",
    description="Current filter controls, load status, and per-layer counts.",
)
async def get_state(state: HazardMapState = Depends(get_hazard_state)):
    """Get filter state and counts."""
    return state.snapshot()


@router.get(
    "/features",
    response_model=HazardFeaturesResponse,
    summary="Get Filtered Advisories",
    description="""
Get SIGMET / AIR SIGMET polygons as GeoJSON, filtered by the current
altitude band and reference time.

Hidden layers are omitted. Advisories without altitude data apply to all
altitudes; advisories without both validity times are always shown.

**Parameters:**
- `layer` - Restrict to one layer (`sigmet` or `airsigmet`)
    """,
    responses={
        200: {
            "description": "Filtered GeoJSON per layer",
            "content": {
                "application/json": {
                    "example": {
                        "layers": {
                            "sigmet": {
                                "type": "FeatureCollection",
                                "features": [{
                                    "type": "Feature",
                                    "geometry": {"type": "Polygon", "coordinates": []},
                                    "properties": {"hazard": "TURB", "base": 24000, "top": 38000}
                                }]
                            }
                        },
                        "count": 1,
                        "target_time": "2024-12-21T12:00:00.000Z",
                        "window": {
                            "start": "2024-12-20T12:00:00.000Z",
                            "end": "2024-12-21T18:00:00.000Z"
                        },
                        "loading": False,
                        "error": None
                    }
                }
            }
        },
        400: {"description": "Unknown layer"}
    }
)
async def get_features(
    layer: Optional[str] = Query(None, description="sigmet or airsigmet"),
    state: HazardMapState = Depends(get_hazard_state),
):
    """Get filtered advisory polygons."""
    if layer is not None and layer not in LAYERS:
        raise HTTPException(status_code=400, detail=f"Unknown layer: {layer}")

    if layer:
        layers = {layer: state.filtered(layer)}
    else:
        layers = state.visible_collections()

    window = state.time_window()
    return {
        "layers": layers,
        "count": sum(len(c["features"]) for c in layers.values()),
        "target_time": to_iso_utc(state.target_time),
        "window": {"start": to_iso_utc(window.start), "end": to_iso_utc(window.end)},
        "loading": state.is_loading,
        "error": state.error,
    }


@router.get(
    "/advisories",
    response_model=AdvisoryListResponse,
    summary="List Visible Advisories",
    description="Visible advisories flattened to hazard, altitude and validity fields.",
)
async def list_advisories(state: HazardMapState = Depends(get_hazard_state)):
    """List visible advisories."""
    advisories = state.advisories()
    return {
        "data": advisories,
        "count": len(advisories),
        "target_time": to_iso_utc(state.target_time),
        "error": state.error,
    }


@router.patch(
    "/filters",
    response_model=HazardStateResponse,
    summary="Update Filters",
    description="""
Update any of the filter controls.

Altitudes are clamped to 0-48,000 ft and the lower bound never exceeds the
upper. Changing the time offset refetches both layers.
    """,
)
async def update_filters(
    update: FilterUpdate = Body(...),
    state: HazardMapState = Depends(get_hazard_state),
):
    """Apply a partial filter update."""
    await state.update_filters(**update.model_dump(exclude_none=True))
    return state.snapshot()


@router.post(
    "/filters/reset",
    response_model=HazardStateResponse,
    summary="Reset Filters",
    description="Restore the default filters (all altitudes, now, both layers) and refetch.",
)
async def reset_filters(state: HazardMapState = Depends(get_hazard_state)):
    """Reset filters to defaults."""
    await state.reset()
    return state.snapshot()


@router.post(
    "/refresh",
    response_model=HazardStateResponse,
    summary="Refresh Now",
    description="Refetch both layers for the current time offset.",
)
async def refresh(state: HazardMapState = Depends(get_hazard_state)):
    """Refetch advisories."""
    await state.refresh()
    return state.snapshot()
