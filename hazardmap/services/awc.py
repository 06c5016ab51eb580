"""
Aviation Weather Center client.

Fetches SIGMET and AIR SIGMET polygons as GeoJSON for a window around a
reference time. Every failure (bad URL, transport, HTTP status, body shape) is
raised as AwcFetchError so callers have a single error path.
"""
import logging
from datetime import datetime
from typing import Optional

import httpx
from prometheus_client import Counter

from hazardmap.core.config import get_settings
from hazardmap.core.timewindow import build_time_window, to_iso_utc

logger = logging.getLogger(__name__)
settings = get_settings()

SIGMET_ENDPOINT = "isigmet"
AIRSIGMET_ENDPOINT = "airsigmet"

GEOJSON_HEADERS = {"Accept": "application/geo+json, application/json"}

# =============================================================================
# Prometheus Metrics
# =============================================================================

AWC_API_REQUESTS = Counter(
    "hazardmap_awc_requests_total",
    "Total AWC API requests made",
    ["endpoint", "status"]  # success, http_error, transport_error, invalid
)
AWC_FEATURES_FETCHED = Counter(
    "hazardmap_awc_features_total",
    "Total advisory features received from AWC",
    ["endpoint"]
)


class AwcFetchError(Exception):
    """Upstream request failed or returned something other than a FeatureCollection."""

    def __init__(self, message: str, endpoint: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


def build_query(
    target: datetime,
    back_hours: Optional[float] = None,
    forward_hours: Optional[float] = None,
) -> dict:
    """Query parameters for the window around ``target``."""
    if back_hours is None:
        back_hours = settings.window_back_hours
    if forward_hours is None:
        forward_hours = settings.window_forward_hours
    start, end = build_time_window(target, back_hours, forward_hours)
    return {
        "format": "geojson",
        "from": to_iso_utc(start),
        "to": to_iso_utc(end),
    }


async def _get(client: httpx.AsyncClient, endpoint: str, params: dict) -> httpx.Response:
    return await client.get(
        f"{settings.awc_base_url.rstrip('/')}/{endpoint}",
        params=params,
        headers={**GEOJSON_HEADERS, "User-Agent": settings.awc_user_agent},
    )


async def fetch_geojson(
    endpoint: str,
    params: dict,
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """Fetch a FeatureCollection from AWC, raising AwcFetchError on failure."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.awc_timeout) as own_client:
                response = await _get(own_client, endpoint, params)
        else:
            response = await _get(client, endpoint, params)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        AWC_API_REQUESTS.labels(endpoint=endpoint, status="transport_error").inc()
        logger.warning(f"AWC request failed for {endpoint}: {e}")
        raise AwcFetchError(f"Request failed ({e.__class__.__name__})", endpoint) from e

    if not response.is_success:
        AWC_API_REQUESTS.labels(endpoint=endpoint, status="http_error").inc()
        logger.warning(f"AWC API error for {endpoint}: {response.status_code}")
        raise AwcFetchError(
            f"Request failed ({response.status_code})", endpoint, response.status_code
        )

    try:
        data = response.json()
    except ValueError as e:
        AWC_API_REQUESTS.labels(endpoint=endpoint, status="invalid").inc()
        raise AwcFetchError("Invalid GeoJSON response", endpoint, response.status_code) from e

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        AWC_API_REQUESTS.labels(endpoint=endpoint, status="invalid").inc()
        logger.warning(f"Unexpected {endpoint} data format: {type(data).__name__}")
        raise AwcFetchError("Invalid GeoJSON response", endpoint, response.status_code)

    if not isinstance(data.get("features"), list):
        data = {**data, "features": []}

    AWC_API_REQUESTS.labels(endpoint=endpoint, status="success").inc()
    AWC_FEATURES_FETCHED.labels(endpoint=endpoint).inc(len(data["features"]))
    logger.debug(f"Fetched {len(data['features'])} features from {endpoint}")
    return data


async def fetch_sigmets(target: datetime, client: Optional[httpx.AsyncClient] = None) -> dict:
    """International SIGMET polygons around ``target``."""
    return await fetch_geojson(SIGMET_ENDPOINT, build_query(target), client)


async def fetch_air_sigmets(target: datetime, client: Optional[httpx.AsyncClient] = None) -> dict:
    """Domestic AIR SIGMET polygons around ``target``."""
    return await fetch_geojson(AIRSIGMET_ENDPOINT, build_query(target), client)
