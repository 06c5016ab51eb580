"""
Advisory property normalization.

The AWC feeds publish the same quantity under several names depending on
product and format (``min_ft`` vs ``base``, ``validTimeFrom`` vs
``valid_from``...). Every lookup goes through an ordered alias family so
the precedence between names lives in one place.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

# Alias families, highest priority first. Order is upstream schema precedence.
FLOOR_ALIASES = ("min_ft", "floor", "base", "minAltFt")
CEILING_ALIASES = ("max_ft", "ceiling", "top", "maxAltFt")
VALID_FROM_ALIASES = ("validTimeFrom", "valid_time_from", "valid_from")
VALID_TO_ALIASES = ("validTimeTo", "valid_time_to", "valid_to")

HAZARD_ALIASES = ("hazard", "phenomenon", "event")
RAW_TEXT_ALIASES = ("raw_text", "rawText", "raw", "rawAirSigmet")


def _as_number(value: Any) -> Optional[float]:
    """Coerce a property value to a finite float, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_instant(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 string or epoch seconds into an aware UTC datetime."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    ts_clean = value.strip()
    if ts_clean.endswith("Z"):
        ts_clean = ts_clean[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(ts_clean)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def read_numeric_prop(
    properties: Optional[Mapping[str, Any]],
    alias_names: Sequence[str],
    fallback: Optional[float] = None,
) -> Optional[float]:
    """
    Return the first usable numeric value among ``alias_names``.

    A value is usable when it is a finite number or a non-blank string that
    parses to one. Unparseable strings are skipped, not errors. When nothing
    matches, ``fallback`` is returned; pass ``None`` for strict absence.
    """
    if not properties:
        return fallback
    for name in alias_names:
        number = _as_number(properties.get(name))
        if number is not None:
            return number
    return fallback


def read_temporal_prop(
    properties: Optional[Mapping[str, Any]],
    alias_names: Sequence[str],
) -> Optional[datetime]:
    """Return the first alias that parses to a valid instant, else None."""
    if not properties:
        return None
    for name in alias_names:
        instant = _as_instant(properties.get(name))
        if instant is not None:
            return instant
    return None


def _first_present(properties: Mapping[str, Any], alias_names: Sequence[str]) -> Any:
    for name in alias_names:
        value = properties.get(name)
        if value is not None and value != "":
            return value
    return None


@dataclass(frozen=True)
class AdvisoryFields:
    """Canonical fields of one advisory; None where no alias was usable."""
    altitude_floor_ft: Optional[float] = None
    altitude_ceiling_ft: Optional[float] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None

    @classmethod
    def from_properties(cls, properties: Optional[Mapping[str, Any]]) -> "AdvisoryFields":
        return cls(
            altitude_floor_ft=read_numeric_prop(properties, FLOOR_ALIASES),
            altitude_ceiling_ft=read_numeric_prop(properties, CEILING_ALIASES),
            valid_from=read_temporal_prop(properties, VALID_FROM_ALIASES),
            valid_to=read_temporal_prop(properties, VALID_TO_ALIASES),
        )


def summarize_feature(feature: Mapping[str, Any], layer: str = "sigmet") -> dict:
    """Flatten an advisory into the fields shown in a map popup."""
    props = feature.get("properties") or {}

    # Popup shows the raw values of the three primary aliases, unparsed.
    floor = _first_present(props, FLOOR_ALIASES[:3])
    top = _first_present(props, CEILING_ALIASES[:3])
    floor_text = "Unknown" if floor is None else floor
    top_text = "Unknown" if top is None else top

    return {
        "layer": layer,
        "id": props.get("id"),
        "hazard": _first_present(props, HAZARD_ALIASES) or "SIGMET",
        "severity": props.get("severity"),
        "altitude_floor": floor,
        "altitude_top": top,
        "altitude_text": f"{floor_text} to {top_text} ft",
        "valid_from": _first_present(props, VALID_FROM_ALIASES + ("issueTime",)),
        "valid_to": _first_present(props, VALID_TO_ALIASES),
        "raw_text": _first_present(props, RAW_TEXT_ALIASES),
    }
