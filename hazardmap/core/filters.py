"""
Advisory filtering by altitude band and reference time.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from hazardmap.core.properties import AdvisoryFields
from hazardmap.core.timewindow import ensure_utc


@dataclass(frozen=True)
class FilterParams:
    """Altitude band in feet and the instant advisories must be valid at."""
    altitude_min: float
    altitude_max: float
    target_time: datetime

    def __post_init__(self):
        if self.altitude_min > self.altitude_max:
            raise ValueError(
                f"altitude_min ({self.altitude_min}) exceeds altitude_max ({self.altitude_max})"
            )
        object.__setattr__(self, "target_time", ensure_utc(self.target_time))


def altitude_overlaps(fields: AdvisoryFields, params: FilterParams) -> bool:
    """Missing floor/ceiling fall back to the query bounds (all altitudes)."""
    floor = fields.altitude_floor_ft
    ceiling = fields.altitude_ceiling_ft
    if floor is None:
        floor = params.altitude_min
    if ceiling is None:
        ceiling = params.altitude_max
    return ceiling >= params.altitude_min and floor <= params.altitude_max


def valid_at(fields: AdvisoryFields, target_time: datetime) -> bool:
    """Inclusive containment; skipped unless both bounds are known."""
    if fields.valid_from is None or fields.valid_to is None:
        return True
    return fields.valid_from <= target_time <= fields.valid_to


def feature_matches(feature: Mapping[str, Any], params: FilterParams) -> bool:
    if feature.get("geometry") is None:
        return False
    fields = AdvisoryFields.from_properties(feature.get("properties"))
    return altitude_overlaps(fields, params) and valid_at(fields, params.target_time)


def filter_features(collection: Mapping[str, Any], params: FilterParams) -> dict:
    """
    Return a copy of ``collection`` holding only features that have a
    geometry, overlap the altitude band, and are valid at the target time.

    Feature objects are shared with the input and keep their order; the
    input collection is never modified.
    """
    features = [
        feature for feature in collection.get("features") or []
        if feature_matches(feature, params)
    ]
    return {**collection, "features": features}
