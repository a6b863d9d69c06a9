"""
Protocol-independent tangle cache.
"""

import time
from typing import Callable, Dict, Iterable, Optional, TYPE_CHECKING

from shared.logging import get_logger

from ..adapters.api_client import ApiClient
from ..models.common import (
    BaseTokenInfoResponse,
    BaseTokenRequest,
    NetworkStatsRequest,
    NetworkStatsResponse,
)
from .read_through import QueryPolicy, ReadThroughCache, meaningful_when_any
from .store import CacheStore, query_key
from .sweeper import StalenessSweeper, sweep_store

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_STALE_TIME = 60.0
DEFAULT_SWEEP_INTERVAL = 60.0


BASE_TOKEN = QueryPolicy(
    name="base_token",
    compute_key=lambda request: query_key("token", request.network),
    is_meaningful=meaningful_when_any("name", "ticker_symbol", "unit", "decimals"),
)

NETWORK_STATS = QueryPolicy(
    name="stats",
    compute_key=lambda request: query_key("stats", request.include_history),
    is_meaningful=meaningful_when_any(
        "items_per_second",
        "confirmed_items_per_second",
        "confirmation_rate",
        "latest_milestone_index",
    ),
)


class TangleCacheService:
    """Caches lookups every protocol generation shares.

    Protocol cache services hold one of these by value and run its
    ``stale_check`` as part of their own.
    """

    def __init__(
        self,
        api: ApiClient,
        networks: Iterable[str],
        *,
        stale_time_seconds: float = DEFAULT_STALE_TIME,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL,
        name: str = "tangle",
        sweeper: bool = True,
        clock: Callable[[], float] = time.time,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self._api = api
        self.stale_time_seconds = stale_time_seconds
        self.metrics = metrics
        self._clock = clock
        self._store = CacheStore(networks, name=name, clock=clock)
        self._cache = ReadThroughCache(self._store, metrics=metrics)
        # Embedded instances are swept by the owning protocol service
        self.sweeper: Optional[StalenessSweeper] = None
        if sweeper:
            self.sweeper = StalenessSweeper(self.stale_check, sweep_interval_seconds, name=name)
        self.logger = get_logger("explorer.tangle_cache")
        self.logger.debug("Tangle cache created", networks=self._store.networks(), stale_time_seconds=stale_time_seconds)

    async def start(self):
        if self.sweeper:
            await self.sweeper.start()

    async def stop(self):
        if self.sweeper:
            await self.sweeper.stop()

    async def __aenter__(self) -> "TangleCacheService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def base_token_info(self, network: str, skip_cache: bool = False) -> Optional[BaseTokenInfoResponse]:
        """Get the base token of a network."""
        return await self._cache.fetch(
            BaseTokenRequest(network=network),
            BASE_TOKEN,
            self._api.base_token_info,
            skip_cache=skip_cache,
        )

    async def network_stats(self, network: str, include_history: bool = False) -> Optional[NetworkStatsResponse]:
        """Get the throughput statistics of a network."""
        return await self._cache.fetch(
            NetworkStatsRequest(network=network, include_history=include_history),
            NETWORK_STATS,
            self._api.stats,
        )

    def stale_check(self) -> int:
        """Remove every entry older than the stale time."""
        return sweep_store(self._store, self.stale_time_seconds, self._clock(), self.metrics)

    def entry_counts(self) -> Dict[str, int]:
        return {self._store.name: len(self._store)}
