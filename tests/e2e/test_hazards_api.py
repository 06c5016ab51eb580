"""
End-to-end tests for hazard API endpoints.

Tests window, state, feature, advisory, filter and refresh endpoints with
mocked AWC fetchers.
"""
import pytest
from httpx import AsyncClient

from hazardmap.services.awc import AwcFetchError


@pytest.mark.asyncio
class TestWindowEndpoint:
    """Tests for the time window endpoint."""

    async def test_get_window_now(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/window")

        assert response.status_code == 200
        data = response.json()
        assert data["label"] == "Now"
        assert data["start"] < data["target_time"] < data["end"]
        assert " → " in data["display"]

    async def test_get_window_offset(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/window", params={"offset_hours": -3})

        assert response.status_code == 200
        assert response.json()["label"] == "-3h"

    async def test_get_window_validates_range(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/window", params={"offset_hours": 12})
        assert response.status_code == 422


@pytest.mark.asyncio
class TestFeatureEndpoints:
    """Tests for filtered GeoJSON and advisory lists."""

    async def test_get_features(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/features")

        assert response.status_code == 200
        data = response.json()
        assert set(data["layers"]) == {"sigmet", "airsigmet"}
        assert data["layers"]["sigmet"]["type"] == "FeatureCollection"
        assert [f["properties"]["id"] for f in data["layers"]["sigmet"]["features"]] == [101, 102]
        assert data["count"] == 4
        assert data["error"] is None
        assert data["window"]["start"] < data["window"]["end"]

    async def test_get_features_single_layer(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/features", params={"layer": "airsigmet"})

        assert response.status_code == 200
        data = response.json()
        assert list(data["layers"]) == ["airsigmet"]
        assert data["count"] == 2

    async def test_get_features_unknown_layer(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/features", params={"layer": "gairmet"})
        assert response.status_code == 400

    async def test_list_advisories(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/advisories")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 4
        turb = data["data"][0]
        assert turb["layer"] == "sigmet"
        assert turb["hazard"] == "TURB"
        assert turb["altitude_text"] == "24000 to 38000 ft"


@pytest.mark.asyncio
class TestFilterEndpoints:
    """Tests for filter updates, reset and refresh."""

    async def test_get_state(self, client: AsyncClient):
        response = await client.get("/api/v1/hazards/state")

        assert response.status_code == 200
        data = response.json()
        assert data["filters"]["altitude_min"] == 0
        assert data["filters"]["altitude_max"] == 48000
        assert data["layers"]["sigmet"]["total"] == 4
        assert data["total_visible"] == 4
        assert data["loading"] is False

    async def test_patch_altitude(self, client: AsyncClient, hazard_state):
        response = await client.patch(
            "/api/v1/hazards/filters",
            json={"altitude_min": 20000, "altitude_max": 30000}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_visible"] == 2
        assert hazard_state.fetchers["sigmet"].await_count == 1

    async def test_patch_clamps_altitude(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/hazards/filters",
            json={"altitude_min": -1000, "altitude_max": 90000}
        )

        filters = response.json()["filters"]
        assert filters["altitude_min"] == 0
        assert filters["altitude_max"] == 48000

    async def test_patch_offset_refetches(self, client: AsyncClient, hazard_state):
        response = await client.patch("/api/v1/hazards/filters", json={"time_offset_hours": -2})

        assert response.status_code == 200
        data = response.json()
        assert data["time_label"] == "-2h"
        assert hazard_state.fetchers["sigmet"].await_count == 2
        assert hazard_state.fetchers["airsigmet"].await_count == 2

    async def test_patch_layer_toggle(self, client: AsyncClient):
        await client.patch("/api/v1/hazards/filters", json={"show_sigmet": False})

        response = await client.get("/api/v1/hazards/features")
        data = response.json()
        assert list(data["layers"]) == ["airsigmet"]
        assert data["count"] == 2

    async def test_reset_filters(self, client: AsyncClient):
        await client.patch(
            "/api/v1/hazards/filters",
            json={"altitude_min": 40000, "show_airsigmet": False}
        )

        response = await client.post("/api/v1/hazards/filters/reset")

        data = response.json()
        assert data["filters"]["altitude_min"] == 0
        assert data["filters"]["show_airsigmet"] is True
        assert data["total_visible"] == 4

    async def test_refresh(self, client: AsyncClient, hazard_state):
        response = await client.post("/api/v1/hazards/refresh")

        assert response.status_code == 200
        assert hazard_state.fetchers["sigmet"].await_count == 2

    async def test_refresh_error_reported(self, client: AsyncClient, hazard_state):
        """Upstream failures surface as a single error field"""
        hazard_state.fetchers["airsigmet"].side_effect = AwcFetchError(
            "Request failed (503)", "airsigmet", 503
        )

        response = await client.post("/api/v1/hazards/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] == "Request failed (503)"
        assert data["total_visible"] == 0

        features = (await client.get("/api/v1/hazards/features")).json()
        assert features["error"] == "Request failed (503)"
        assert features["count"] == 0


@pytest.mark.asyncio
class TestSystemEndpoints:
    """Tests for health and metrics."""

    async def test_health_healthy(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["awc"]["status"] == "up"

    async def test_health_degraded_on_error(self, client: AsyncClient, hazard_state):
        hazard_state.error = "Invalid GeoJSON response"

        data = (await client.get("/api/v1/health")).json()

        assert data["status"] == "degraded"
        assert data["services"]["awc"]["error"] == "Invalid GeoJSON response"

    async def test_metrics(self, client: AsyncClient):
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
