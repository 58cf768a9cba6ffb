"""APScheduler setup for periodic tasks."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


def create_scheduler(monitor) -> AsyncIOScheduler:
    """Create and configure the scheduler with all jobs."""
    from septa_tracker.config import settings

    scheduler = AsyncIOScheduler()

    # Probe every SEPTA feed so diagnostics stay fresh between requests
    scheduler.add_job(
        monitor.probe_feeds,
        "interval",
        seconds=settings.feed_probe_interval_seconds,
        id="probe_feeds",
        name="Probe SEPTA feeds for availability",
        max_instances=1,
    )

    return scheduler
