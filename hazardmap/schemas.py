"""
Pydantic schemas for request/response validation with OpenAPI documentation.
"""
from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Filter Schemas
# ============================================================================

class FilterUpdate(BaseModel):
    """Partial update of the map filter controls."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "altitude_min": 10000,
                "altitude_max": 30000,
                "time_offset_hours": -3,
                "show_airsigmet": False
            }
        }
    )

    altitude_min: Optional[float] = Field(None, description="Lower altitude bound in feet")
    altitude_max: Optional[float] = Field(None, description="Upper altitude bound in feet")
    time_offset_hours: Optional[float] = Field(None, description="Hours from now (-24 to +6)")
    show_sigmet: Optional[bool] = Field(None, description="Show the SIGMET layer")
    show_airsigmet: Optional[bool] = Field(None, description="Show the AIR SIGMET layer")


class FilterStateSchema(BaseModel):
    """Current filter controls."""
    altitude_min: float = Field(..., description="Lower altitude bound in feet")
    altitude_max: float = Field(..., description="Upper altitude bound in feet")
    time_offset_hours: float = Field(..., description="Hours from now")
    show_sigmet: bool = Field(..., description="SIGMET layer visible")
    show_airsigmet: bool = Field(..., description="AIR SIGMET layer visible")


class LayerCounts(BaseModel):
    """Per-layer feature counts."""
    visible: bool = Field(..., description="Layer toggle state")
    total: int = Field(..., description="Features fetched from upstream")
    filtered: int = Field(..., description="Features passing the current filters")


class HazardStateResponse(BaseModel):
    """Filter state, load status and counts."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filters": {
                    "altitude_min": 0,
                    "altitude_max": 48000,
                    "time_offset_hours": 0,
                    "show_sigmet": True,
                    "show_airsigmet": True
                },
                "time_label": "Now",
                "target_time": "2024-12-21T12:00:00.000Z",
                "loading": False,
                "error": None,
                "layers": {
                    "sigmet": {"visible": True, "total": 12, "filtered": 4},
                    "airsigmet": {"visible": True, "total": 7, "filtered": 2}
                },
                "total_visible": 6,
                "last_updated": "2024-12-21T12:00:01.532Z"
            }
        }
    )

    filters: FilterStateSchema
    time_label: str = Field(..., description="Slider label for the time offset")
    target_time: str = Field(..., description="Reference instant (ISO 8601)")
    loading: bool = Field(..., description="A refresh is in flight")
    error: Optional[str] = Field(None, description="Last upstream error, if any")
    layers: dict[str, LayerCounts] = Field(..., description="Counts per layer")
    total_visible: int = Field(..., description="Filtered features in visible layers")
    last_updated: Optional[str] = Field(None, description="Last successful load (ISO 8601)")


# ============================================================================
# Time Window Schemas
# ============================================================================

class TimeWindowResponse(BaseModel):
    """Reference time and upstream query window for an offset."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "offset_hours": -3,
                "label": "-3h",
                "target_time": "2024-12-21T09:00:00.000Z",
                "start": "2024-12-20T09:00:00.000Z",
                "end": "2024-12-21T15:00:00.000Z",
                "display": "2024-12-20T09:00Z → 2024-12-21T15:00Z"
            }
        }
    )

    offset_hours: float = Field(..., description="Requested offset from now in hours")
    label: str = Field(..., description="Slider label")
    target_time: str = Field(..., description="Reference instant (ISO 8601)")
    start: str = Field(..., description="Window start (ISO 8601)")
    end: str = Field(..., description="Window end (ISO 8601)")
    display: str = Field(..., description="Human readable window")


# ============================================================================
# Feature Schemas
# ============================================================================

class HazardFeaturesResponse(BaseModel):
    """Filtered GeoJSON collections for the visible layers."""
    layers: dict[str, dict[str, Any]] = Field(
        ..., description="GeoJSON FeatureCollection per visible layer"
    )
    count: int = Field(..., description="Total features returned")
    target_time: str = Field(..., description="Reference instant (ISO 8601)")
    window: dict[str, str] = Field(..., description="Upstream query window")
    loading: bool = Field(..., description="A refresh is in flight")
    error: Optional[str] = Field(None, description="Last upstream error, if any")


class AdvisorySummary(BaseModel):
    """One advisory flattened for a popup or list view."""
    layer: str = Field(..., description="sigmet or airsigmet")
    id: Optional[Any] = Field(None, description="Upstream identifier")
    hazard: Any = Field(..., description="Hazard or phenomenon")
    severity: Optional[Any] = Field(None, description="Severity, when published")
    altitude_floor: Optional[Any] = Field(None, description="Floor as published")
    altitude_top: Optional[Any] = Field(None, description="Top as published")
    altitude_text: str = Field(..., description="Floor to top, in feet")
    valid_from: Optional[Any] = Field(None, description="Start of validity")
    valid_to: Optional[Any] = Field(None, description="End of validity")
    raw_text: Optional[Any] = Field(None, description="Raw advisory text")


class AdvisoryListResponse(BaseModel):
    """Flat list of visible advisories."""
    data: list[AdvisorySummary] = Field(default_factory=list)
    count: int = Field(0, description="Number of advisories")
    target_time: str = Field(..., description="Reference instant (ISO 8601)")
    error: Optional[str] = Field(None, description="Last upstream error, if any")


# ============================================================================
# System Schemas
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "services": {
                    "awc": {"status": "up", "last_updated": "2024-12-21T12:00:01.532Z"},
                    "refresh": {"status": "idle"}
                },
                "timestamp": "2024-12-21T12:00:05.000Z"
            }
        }
    )

    status: str = Field(..., description="Overall health status (healthy, degraded)")
    services: dict = Field(..., description="Individual service health status")
    timestamp: str = Field(..., description="Health check timestamp")
