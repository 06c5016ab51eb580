"""Services package."""
from hazardmap.services.awc import (
    AwcFetchError, build_query, fetch_geojson, fetch_sigmets, fetch_air_sigmets
)
from hazardmap.services.hazards import (
    LAYERS, FilterState, HazardMapState, create_hazard_state, get_hazard_state,
    start_refresh_task, stop_refresh_task
)

__all__ = [
    # AWC client
    "AwcFetchError",
    "build_query",
    "fetch_geojson",
    "fetch_sigmets",
    "fetch_air_sigmets",
    # Hazard state
    "LAYERS",
    "FilterState",
    "HazardMapState",
    "create_hazard_state",
    "get_hazard_state",
    "start_refresh_task",
    "stop_refresh_task",
]
