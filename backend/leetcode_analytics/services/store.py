"""
Analytics Snapshot Store

Holds the current AnalyticsSnapshot and rebuilds it on demand. Refreshes are
single-flight: callers arriving while a refresh is running await that same
refresh instead of starting another fetch. A snapshot built from an upload
while a refresh is running stays current when that refresh finishes.
"""

import asyncio
from typing import Optional
import structlog

from leetcode_analytics.services.data_processing import AnalyticsSnapshot, CSVIngestor, DataProcessor
from leetcode_analytics.services.github import GitHubClient

logger = structlog.get_logger()


class AnalyticsStore:
    """Process-wide holder of the latest snapshot"""

    def __init__(
        self,
        ingestor: Optional[CSVIngestor] = None,
        github: Optional[GitHubClient] = None,
        processor: Optional[DataProcessor] = None
    ):
        self.ingestor = ingestor or CSVIngestor()
        self.github = github or GitHubClient()
        self.processor = processor or DataProcessor()
        self.snapshot: Optional[AnalyticsSnapshot] = None
        self._inflight: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.refresh_count = 0
        self._generation = 0

    async def _load(self, generation: int) -> AnalyticsSnapshot:
        self.refresh_count += 1
        text, source = await self.ingestor.load()
        commit = await self.github.get_last_commit_info() if source == "remote" else None
        snapshot = self.processor.build_snapshot(text, source=source, commit=commit)
        if self._generation != generation:
            # An upload landed while this load was running and stays current
            logger.info("Discarding refreshed snapshot superseded by upload", source=source)
            return self.snapshot
        self._generation += 1
        self.snapshot = snapshot
        return snapshot

    async def refresh(self) -> AnalyticsSnapshot:
        """Rebuild the snapshot from source, joining any refresh already running"""
        async with self._lock:
            if self._inflight is None or self._inflight.done():
                logger.info("Starting snapshot refresh")
                self._inflight = asyncio.ensure_future(self._load(self._generation))
            else:
                logger.info("Refresh already in progress, joining it")
            task = self._inflight

        try:
            # A cancelled caller must not cancel the load other callers share
            return await asyncio.shield(task)
        except Exception as e:
            logger.error("Snapshot refresh failed, keeping previous snapshot", error=str(e))
            raise

    async def get_snapshot(self) -> AnalyticsSnapshot:
        """Current snapshot, loading it on first use"""
        if self.snapshot is None:
            return await self.refresh()
        return self.snapshot

    def build_from_text(self, text: str, source: str = "upload") -> AnalyticsSnapshot:
        """Build a snapshot from supplied CSV text and make it current"""
        snapshot = self.processor.build_snapshot(text, source=source)
        self._generation += 1
        self.snapshot = snapshot
        return snapshot


# Global store instance, replaced via dependency overrides in tests
analytics_store = AnalyticsStore()


def get_store() -> AnalyticsStore:
    """Dependency returning the global analytics store"""
    return analytics_store
