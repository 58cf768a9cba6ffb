"""Diagnostics API for checking SEPTA feed health."""

from fastapi import APIRouter

from septa_tracker.config import settings

router = APIRouter(prefix="/api/diagnostics", tags=["diagnostics"])

# Will be set by main.py
monitor = None


@router.get("/feeds")
async def get_feed_diagnostics():
    """Last observed outcome of every SEPTA feed."""
    if monitor is None:
        return {"error": "Feed monitor not initialized"}
    return {
        **monitor.snapshot(),
        "probe_enabled": settings.feed_probe_enabled,
        "poll_interval_seconds": settings.poll_interval_seconds,
    }


@router.post("/feeds/probe")
async def probe_feeds():
    """Fetch every feed once right now and return the fresh statuses."""
    if monitor is None:
        return {"error": "Feed monitor not initialized"}
    await monitor.probe_feeds()
    return monitor.snapshot()
