"""Keeps the last observed outcome of each SEPTA feed for diagnostics."""

import datetime
import logging
from dataclasses import dataclass, asdict

from septa_tracker.core.septa_client import FeedResult, UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass
class FeedStatus:
    feed: str
    ok: bool
    checked_at: datetime.datetime
    elapsed_ms: float
    record_count: int
    error: str | None = None
    consecutive_failures: int = 0
    last_success_at: datetime.datetime | None = None


class FeedMonitor:
    def __init__(self, clients=None) -> None:
        self.clients = list(clients or [])
        self._status: dict[str, FeedStatus] = {}

    def record(self, result: FeedResult) -> FeedStatus:
        now = datetime.datetime.now(datetime.timezone.utc)
        prev = self._status.get(result.feed)
        failures = 0 if result.ok else (prev.consecutive_failures + 1 if prev else 1)
        last_success = now if result.ok else (prev.last_success_at if prev else None)
        status = FeedStatus(
            feed=result.feed,
            ok=result.ok,
            checked_at=now,
            elapsed_ms=round(result.elapsed_ms, 1),
            record_count=result.record_count,
            error=str(result.error) if result.error else None,
            consecutive_failures=failures,
            last_success_at=last_success,
        )
        self._status[result.feed] = status
        if failures and failures % 10 == 0:
            logger.error("SEPTA feed %s has failed %d times in a row", result.feed, failures)
        return status

    def record_timeout(self, feed: str, deadline_s: float) -> FeedStatus:
        return self.record(FeedResult(
            feed=feed,
            error=UpstreamUnavailable(feed, f"no answer within {deadline_s:.1f}s"),
            elapsed_ms=deadline_s * 1000,
        ))

    async def probe_feeds(self) -> None:
        """Fetch every feed once and record the outcome (scheduled job)."""
        for client in self.clients:
            try:
                self.record(await client.fetch())
            except Exception:
                logger.exception("Probe of feed %s crashed", client.feed)

    def snapshot(self) -> dict:
        return {
            "feeds": [
                {
                    **asdict(s),
                    "checked_at": s.checked_at.isoformat(),
                    "last_success_at": s.last_success_at.isoformat() if s.last_success_at else None,
                }
                for s in sorted(self._status.values(), key=lambda s: s.feed)
            ],
        }
