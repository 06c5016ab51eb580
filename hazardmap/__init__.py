"""Aviation hazard map: SIGMET / AIR SIGMET advisories filtered by altitude and time."""

__version__ = "1.0.0"
