"""API routers package."""
from hazardmap.routers import hazards, system

__all__ = [
    "hazards",
    "system",
]
