"""Core package containing configuration and the advisory filtering engine."""
from hazardmap.core.config import get_settings, Settings
from hazardmap.core.timewindow import (
    TimeWindow,
    offset_to_instant,
    build_time_window,
    format_offset_label,
    format_range_for_display,
    to_iso_utc,
)
from hazardmap.core.properties import (
    FLOOR_ALIASES,
    CEILING_ALIASES,
    VALID_FROM_ALIASES,
    VALID_TO_ALIASES,
    AdvisoryFields,
    read_numeric_prop,
    read_temporal_prop,
    summarize_feature,
)
from hazardmap.core.filters import FilterParams, filter_features

__all__ = [
    "get_settings",
    "Settings",
    "TimeWindow",
    "offset_to_instant",
    "build_time_window",
    "format_offset_label",
    "format_range_for_display",
    "to_iso_utc",
    "FLOOR_ALIASES",
    "CEILING_ALIASES",
    "VALID_FROM_ALIASES",
    "VALID_TO_ALIASES",
    "AdvisoryFields",
    "read_numeric_prop",
    "read_temporal_prop",
    "summarize_feature",
    "FilterParams",
    "filter_features",
]
