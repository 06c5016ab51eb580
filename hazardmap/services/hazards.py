"""
Hazard map state service.

Owns everything a map client needs between requests:
- Filter parameters (altitude band, time offset, layer toggles)
- The last fetched SIGMET / AIR SIGMET collections
- Loading and error status

Fetches for both layers run concurrently. Starting a refresh cancels the
previous one, and a generation counter guarantees that a superseded load
never writes its result. Filtering is recomputed on every read, so
altitude changes are served without touching the network.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict, replace
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import httpx

from hazardmap.core.config import get_settings
from hazardmap.core.filters import FilterParams, filter_features
from hazardmap.core.properties import summarize_feature
from hazardmap.core.timewindow import (
    TimeWindow, build_time_window, offset_to_instant, format_offset_label, to_iso_utc
)
from hazardmap.services import awc
from hazardmap.services.awc import AwcFetchError

logger = logging.getLogger(__name__)
settings = get_settings()

SIGMET = "sigmet"
AIRSIGMET = "airsigmet"
LAYERS = (SIGMET, AIRSIGMET)

Fetcher = Callable[[datetime, Optional[httpx.AsyncClient]], Awaitable[dict]]

# Singleton state and background task (set during startup)
_hazard_state: Optional["HazardMapState"] = None
_refresh_task: Optional[asyncio.Task] = None


def empty_collection() -> dict:
    return {"type": "FeatureCollection", "features": []}


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


@dataclass(frozen=True)
class FilterState:
    """User-facing filter controls."""
    altitude_min: float = 0
    altitude_max: float = 48000
    time_offset_hours: float = 0
    show_sigmet: bool = True
    show_airsigmet: bool = True

    def shows(self, layer: str) -> bool:
        return self.show_sigmet if layer == SIGMET else self.show_airsigmet


def default_filters() -> FilterState:
    return FilterState(
        altitude_min=settings.altitude_min_ft,
        altitude_max=settings.altitude_max_ft,
    )


class HazardMapState:
    """Coordinates fetching, filter parameters, and filtered views."""

    def __init__(
        self,
        fetchers: Optional[dict[str, Fetcher]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.fetchers: dict[str, Fetcher] = fetchers or {
            SIGMET: awc.fetch_sigmets,
            AIRSIGMET: awc.fetch_air_sigmets,
        }
        self.filters = default_filters()
        self.collections: dict[str, dict] = {layer: empty_collection() for layer in LAYERS}
        self.target_time: datetime = offset_to_instant(self.filters.time_offset_hours)
        self.is_loading = False
        self.error: Optional[str] = None
        self.last_updated: Optional[datetime] = None

        self._client = client
        self._owns_client = client is None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # Filter controls
    # -------------------------------------------------------------------------

    def set_altitude_range(
        self,
        altitude_min: Optional[float] = None,
        altitude_max: Optional[float] = None,
    ) -> None:
        """Clamp to the slider bounds; the edited end never crosses the other."""
        low_limit, high_limit = settings.altitude_min_ft, settings.altitude_max_ft
        low = self.filters.altitude_min if altitude_min is None else altitude_min
        high = self.filters.altitude_max if altitude_max is None else altitude_max
        low, high = clamp(low, low_limit, high_limit), clamp(high, low_limit, high_limit)

        if low > high:
            if altitude_min is not None and altitude_max is not None:
                low, high = high, low
            elif altitude_min is not None:
                low = high
            else:
                high = low

        self.filters = replace(self.filters, altitude_min=low, altitude_max=high)

    def set_time_offset(self, offset_hours: float) -> bool:
        """Returns True when the offset actually changed."""
        offset = clamp(
            offset_hours, settings.time_offset_min_hours, settings.time_offset_max_hours
        )
        changed = offset != self.filters.time_offset_hours
        self.filters = replace(self.filters, time_offset_hours=offset)
        return changed

    def set_layer_visibility(
        self,
        show_sigmet: Optional[bool] = None,
        show_airsigmet: Optional[bool] = None,
    ) -> None:
        if show_sigmet is not None:
            self.filters = replace(self.filters, show_sigmet=show_sigmet)
        if show_airsigmet is not None:
            self.filters = replace(self.filters, show_airsigmet=show_airsigmet)

    async def update_filters(
        self,
        altitude_min: Optional[float] = None,
        altitude_max: Optional[float] = None,
        time_offset_hours: Optional[float] = None,
        show_sigmet: Optional[bool] = None,
        show_airsigmet: Optional[bool] = None,
    ) -> None:
        """Apply a partial filter update; a new time offset triggers a refetch."""
        if altitude_min is not None or altitude_max is not None:
            self.set_altitude_range(altitude_min, altitude_max)
        self.set_layer_visibility(show_sigmet, show_airsigmet)
        if time_offset_hours is not None and self.set_time_offset(time_offset_hours):
            await self.refresh()

    async def reset(self) -> None:
        """Restore default filters and refetch."""
        self.filters = default_filters()
        await self.refresh()

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.awc_timeout)
        return self._client

    async def refresh(self) -> Optional[bool]:
        """
        Refetch both layers for the current time offset.

        Returns True on success, False when the upstream fetch failed, and
        None when this refresh was superseded by a newer one.
        """
        self._generation += 1
        generation = self._generation

        if self._task is not None and not self._task.done():
            self._task.cancel()

        self.target_time = offset_to_instant(self.filters.time_offset_hours)
        self.is_loading = True
        self.error = None

        task = asyncio.create_task(self._load(generation, self.target_time))
        self._task = task
        await asyncio.wait({task})

        if task.cancelled():
            logger.debug(f"Hazard refresh {generation} superseded")
            return None
        return task.result()

    async def _load(self, generation: int, target: datetime) -> bool:
        client = self._get_client()
        fetches = [
            asyncio.create_task(self.fetchers[layer](target, client)) for layer in LAYERS
        ]
        try:
            results = await asyncio.gather(*fetches)
        except AwcFetchError as e:
            if generation == self._generation:
                logger.warning(f"Failed to fetch advisories from {e.endpoint}: {e}")
                self.error = str(e)
                self.collections = {layer: empty_collection() for layer in LAYERS}
            return False
        finally:
            # gather leaves the other layer running when one fails
            pending = [fetch for fetch in fetches if not fetch.done()]
            for fetch in pending:
                fetch.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            logger.debug(f"Discarding stale hazard load {generation}")
            return False

        self.collections = dict(zip(LAYERS, results))
        self.last_updated = datetime.now(timezone.utc)
        logger.info(
            f"Loaded {len(results[0]['features'])} SIGMET and "
            f"{len(results[1]['features'])} AIR SIGMET advisories for {to_iso_utc(target)}"
        )
        return True

    async def close(self) -> None:
        """Cancel any in-flight load and release the HTTP client."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def filter_params(self) -> FilterParams:
        return FilterParams(
            altitude_min=self.filters.altitude_min,
            altitude_max=self.filters.altitude_max,
            target_time=self.target_time,
        )

    def time_window(self) -> TimeWindow:
        return build_time_window(
            self.target_time, settings.window_back_hours, settings.window_forward_hours
        )

    def filtered(self, layer: str) -> dict:
        return filter_features(self.collections[layer], self.filter_params())

    def visible_layers(self) -> list[str]:
        return [layer for layer in LAYERS if self.filters.shows(layer)]

    def visible_collections(self) -> dict[str, dict]:
        params = self.filter_params()
        return {
            layer: filter_features(self.collections[layer], params)
            for layer in self.visible_layers()
        }

    def total_visible(self) -> int:
        return sum(len(c["features"]) for c in self.visible_collections().values())

    def advisories(self) -> list[dict]:
        return [
            summarize_feature(feature, layer)
            for layer, collection in self.visible_collections().items()
            for feature in collection["features"]
        ]

    def snapshot(self) -> dict:
        """Status payload for the API and CLI."""
        params = self.filter_params()
        layers = {}
        for layer in LAYERS:
            filtered = filter_features(self.collections[layer], params)
            layers[layer] = {
                "visible": self.filters.shows(layer),
                "total": len(self.collections[layer]["features"]),
                "filtered": len(filtered["features"]),
            }
        return {
            "filters": asdict(self.filters),
            "time_label": format_offset_label(self.filters.time_offset_hours),
            "target_time": to_iso_utc(self.target_time),
            "loading": self.is_loading,
            "error": self.error,
            "layers": layers,
            "total_visible": sum(v["filtered"] for v in layers.values() if v["visible"]),
            "last_updated": to_iso_utc(self.last_updated) if self.last_updated else None,
        }


# =============================================================================
# Service lifecycle
# =============================================================================

def create_hazard_state(**kwargs) -> HazardMapState:
    """Create the process-wide hazard state."""
    global _hazard_state
    _hazard_state = HazardMapState(**kwargs)
    return _hazard_state


def get_hazard_state() -> HazardMapState:
    """Get the process-wide hazard state, creating it on first use."""
    global _hazard_state
    if _hazard_state is None:
        _hazard_state = HazardMapState()
    return _hazard_state


async def hazard_refresh_task(state: HazardMapState, interval: int) -> None:
    """Background task to refresh advisories on a timer."""
    logger.info("Hazard refresh task started")

    while True:
        await asyncio.sleep(interval)
        try:
            await state.refresh()
        except Exception as e:
            logger.error(f"Error in hazard refresh task: {e}")


async def start_refresh_task(state: HazardMapState) -> asyncio.Task:
    """Load advisories once, then keep them fresh in the background."""
    global _refresh_task

    logger.info("Loading initial hazard data...")
    await state.refresh()

    _refresh_task = asyncio.create_task(
        hazard_refresh_task(state, settings.refresh_interval)
    )
    return _refresh_task


async def stop_refresh_task() -> None:
    """Stop the background refresh task."""
    global _refresh_task
    if _refresh_task:
        _refresh_task.cancel()
        try:
            await _refresh_task
        except asyncio.CancelledError:
            pass
        _refresh_task = None
        logger.info("Hazard refresh task stopped")
