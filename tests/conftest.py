"""
Shared pytest fixtures for Hazard Map tests.

Provides sample advisory collections, a hazard state wired to mocked
fetchers, and an HTTP client bound to the FastAPI app.
"""
import os
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport

# Set test environment variables before importing app
os.environ.setdefault('HAZARDMAP_AUTO_REFRESH_ENABLED', 'false')
os.environ.setdefault('HAZARDMAP_LOG_LEVEL', 'WARNING')
os.environ.setdefault('HAZARDMAP_AWC_BASE_URL', 'https://awc.test/api/data')

from hazardmap.main import app
from hazardmap.services.hazards import HazardMapState, get_hazard_state


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def polygon(offset: float = 0) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[
            [-100 + offset, 40], [-99 + offset, 40], [-99 + offset, 41],
            [-100 + offset, 41], [-100 + offset, 40]
        ]],
    }


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Sample Advisory Data Fixtures
# =============================================================================

@pytest.fixture
def sample_sigmet_collection(now):
    """International SIGMETs: two current, one expired, one without geometry."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": polygon(0),
                "properties": {
                    "id": 101,
                    "hazard": "TURB",
                    "severity": "SEV",
                    "base": 24000,
                    "top": 38000,
                    "validTimeFrom": iso(now - timedelta(hours=1)),
                    "validTimeTo": iso(now + timedelta(hours=3)),
                    "rawSigmet": "SIGMET TURB ...",
                },
            },
            {
                "type": "Feature",
                "geometry": polygon(2),
                "properties": {
                    "id": 102,
                    "hazard": "ICE",
                    "min_ft": "8000",
                    "max_ft": "16000",
                    "validTimeFrom": iso(now - timedelta(hours=1)),
                    "validTimeTo": iso(now + timedelta(hours=3)),
                },
            },
            {
                "type": "Feature",
                "geometry": polygon(4),
                "properties": {
                    "id": 103,
                    "hazard": "CONVECTIVE",
                    "validTimeFrom": iso(now - timedelta(hours=10)),
                    "validTimeTo": iso(now - timedelta(hours=4)),
                },
            },
            {
                "type": "Feature",
                "geometry": None,
                "properties": {"id": 104, "hazard": "ASH"},
            },
        ],
    }


@pytest.fixture
def sample_airsigmet_collection(now):
    """Domestic AIR SIGMETs: one without altitudes, one low-level."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": polygon(6),
                "properties": {
                    "id": 201,
                    "hazard": "IFR",
                    "valid_from": iso(now - timedelta(hours=2)),
                },
            },
            {
                "type": "Feature",
                "geometry": polygon(8),
                "properties": {
                    "id": 202,
                    "hazard": "MTN OBSCN",
                    "floor": 0,
                    "ceiling": 12000,
                    "valid_time_from": iso(now - timedelta(hours=1)),
                    "valid_time_to": iso(now + timedelta(hours=5)),
                },
            },
        ],
    }


@pytest.fixture
def mock_fetchers(sample_sigmet_collection, sample_airsigmet_collection):
    """Fetchers returning the sample collections."""
    return {
        "sigmet": AsyncMock(return_value=sample_sigmet_collection),
        "airsigmet": AsyncMock(return_value=sample_airsigmet_collection),
    }


@pytest_asyncio.fixture
async def hazard_state(mock_fetchers) -> AsyncGenerator[HazardMapState, None]:
    """Hazard state loaded once from the mocked fetchers."""
    state = HazardMapState(fetchers=mock_fetchers, client=MagicMock())
    await state.refresh()
    yield state
    await state.close()


@pytest_asyncio.fixture
async def client(hazard_state: HazardMapState) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with hazard state override."""
    app.dependency_overrides[get_hazard_state] = lambda: hazard_state

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
