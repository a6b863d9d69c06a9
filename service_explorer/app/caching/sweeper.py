"""
Periodic eviction of stale tangle cache entries.
"""

import asyncio
from typing import Callable, Optional, TYPE_CHECKING

from shared.logging import get_logger

from .store import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


def sweep_store(
    store: CacheStore,
    ttl_seconds: float,
    now: float,
    metrics: Optional["MetricsCollector"] = None,
) -> int:
    """Delete every entry whose age has reached ``ttl_seconds``.

    Walks all partitions in one pass and returns the number of evictions.
    """
    evicted = 0
    for network in store.networks():
        for key, entry in store.items(network):
            if now - entry.cached_at >= ttl_seconds:
                store.delete(network, key)
                evicted += 1

    if metrics:
        metrics.increment_counter("cache_evictions_total", evicted, cache=store.name)
        metrics.set_gauge("cache_entries", len(store), cache=store.name)
    return evicted


class StalenessSweeper:
    """Runs a sweep callable on a fixed interval until stopped."""

    def __init__(self, sweep: Callable[[], int], interval_seconds: float, *, name: str = "tangle"):
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self.name = name
        self.logger = get_logger(f"explorer.sweeper.{name}")

        self.sweep_task: Optional[asyncio.Task] = None
        self.running = False

    async def start(self):
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self.running = True
        self.sweep_task = asyncio.create_task(self._sweep_loop())
        self.logger.info("Staleness sweeper started", interval_seconds=self.interval_seconds)

    async def stop(self):
        """Cancel the sweep loop and wait for it to finish."""
        self.running = False
        if self.sweep_task:
            self.sweep_task.cancel()
            try:
                await self.sweep_task
            except asyncio.CancelledError:
                pass
            self.sweep_task = None

        self.logger.info("Staleness sweeper stopped")

    def tick(self) -> int:
        """Run one sweep now."""
        evicted = self.sweep()
        if evicted:
            self.logger.debug("Evicted stale cache entries", evicted=evicted)
        return evicted

    async def _sweep_loop(self):
        while self.running:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.tick()
            except Exception as e:
                self.logger.error("Staleness sweep failed", error=str(e))
