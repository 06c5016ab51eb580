"""
Hazard Map API v1.0.0

A FastAPI application serving SIGMET and AIR SIGMET advisories from
aviationweather.gov, filtered by altitude band and reference time.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hazardmap import __version__
from hazardmap.core import get_settings
from hazardmap.services.hazards import create_hazard_state, start_refresh_task, stop_refresh_task
from hazardmap.routers import hazards, system

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting Hazard Map API v{__version__}")

    state = create_hazard_state()

    if settings.auto_refresh_enabled:
        await start_refresh_task(state)
        logger.info(f"Hazard refresh service started (interval: {settings.refresh_interval}s)")
    else:
        logger.info("Hazard auto refresh disabled")

    logger.info(f"AWC base URL: {settings.awc_base_url}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_refresh_task()
    await state.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Hazard Map API",
    version=__version__,
    description="""
## Overview
REST API behind the aviation hazard map. Fetches SIGMET and AIR SIGMET
polygons from aviationweather.gov and serves them filtered by altitude
band and a simulated reference time.

## Features
- **Filtered GeoJSON**: One FeatureCollection per advisory layer
- **Altitude Band**: 0 to 48,000 ft, inclusive overlap test
- **Time Slider**: Reference time from 24 hours ago to 6 hours ahead
- **Layer Toggles**: Show or hide SIGMET and AIR SIGMET independently

## Rate Limiting
Advisories are refetched every 5 minutes and on every time offset change.
Altitude changes are served from memory.
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Hazards",
            "description": "Filtered SIGMET / AIR SIGMET advisories"
        },
        {
            "name": "System",
            "description": "Health checks and metrics"
        },
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(hazards.router)
app.include_router(system.router)


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("hazardmap.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
