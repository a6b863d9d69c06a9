"""
Tangle cache for chrysalis networks.
"""

import time
from typing import Callable, Dict, Iterable, Optional, TYPE_CHECKING

from shared.logging import get_logger

from ..adapters.api_client import ApiClient
from ..adapters.chrysalis_api_client import ChrysalisApiClient
from ..models.chrysalis import (
    ChrysalisMilestoneRequest,
    ChrysalisMilestoneResponse,
    ChrysalisSearchRequest,
    ChrysalisSearchResponse,
    ChrysalisTransactionHistoryRequest,
    ChrysalisTransactionHistoryResponse,
)
from ..models.common import BaseTokenInfoResponse, NetworkStatsResponse
from .read_through import QueryPolicy, ReadThroughCache, meaningful_when_any
from .store import CacheStore, query_key
from .sweeper import StalenessSweeper, sweep_store
from .tangle_cache_service import DEFAULT_STALE_TIME, DEFAULT_SWEEP_INTERVAL, TangleCacheService

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


_search_has_result = meaningful_when_any(
    "address",
    "address_output_ids",
    "indexed_message_ids",
    "milestone",
    "output",
    "did",
)


def search_is_meaningful(response: ChrysalisSearchResponse) -> bool:
    """A string ``message`` is a status line, not a found ledger message."""
    if _search_has_result(response):
        return True
    return not response.error and isinstance(response.message, dict)


SEARCH = QueryPolicy(
    name="chrysalis_search",
    compute_key=lambda r: query_key("search", r.query, r.cursor),
    is_meaningful=search_is_meaningful,
)

MILESTONE = QueryPolicy(
    name="chrysalis_milestone",
    compute_key=lambda r: query_key("milestone", r.milestone_index),
    is_meaningful=meaningful_when_any("milestone"),
)

TRANSACTION_HISTORY = QueryPolicy(
    name="chrysalis_transaction_history",
    compute_key=lambda r: query_key("history", r.address, r.cursor, r.page_size),
    is_meaningful=meaningful_when_any("history"),
)


class ChrysalisTangleCacheService:
    """Cache tangle requests for chrysalis."""

    def __init__(
        self,
        api: ChrysalisApiClient,
        networks: Iterable[str],
        *,
        base_api: Optional[ApiClient] = None,
        stale_time_seconds: float = DEFAULT_STALE_TIME,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.time,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        networks = list(networks)
        self._api = api
        self.stale_time_seconds = stale_time_seconds
        self.metrics = metrics
        self._clock = clock
        self.tangle = TangleCacheService(
            base_api or api,
            networks,
            stale_time_seconds=stale_time_seconds,
            sweep_interval_seconds=sweep_interval_seconds,
            name="chrysalis_shared",
            sweeper=False,
            clock=clock,
            metrics=metrics,
        )
        self._store = CacheStore(networks, name="chrysalis", clock=clock)
        self._cache = ReadThroughCache(self._store, metrics=metrics)
        self.sweeper = StalenessSweeper(self.stale_check, sweep_interval_seconds, name="chrysalis")
        self.logger = get_logger("explorer.chrysalis_cache")
        self.logger.debug("Chrysalis cache created", networks=networks, stale_time_seconds=stale_time_seconds)

    async def start(self):
        await self.sweeper.start()

    async def stop(self):
        await self.sweeper.stop()

    async def __aenter__(self) -> "ChrysalisTangleCacheService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def base_token_info(self, network: str, skip_cache: bool = False) -> Optional[BaseTokenInfoResponse]:
        return await self.tangle.base_token_info(network, skip_cache=skip_cache)

    async def network_stats(self, network: str, include_history: bool = False) -> Optional[NetworkStatsResponse]:
        return await self.tangle.network_stats(network, include_history=include_history)

    async def search(
        self, network: str, query: str, cursor: Optional[str] = None
    ) -> Optional[ChrysalisSearchResponse]:
        request = ChrysalisSearchRequest(network=network, query=query, cursor=cursor)
        return await self._cache.fetch(request, SEARCH, self._api.search)

    async def milestone_details(self, network: str, milestone_index: int) -> Optional[ChrysalisMilestoneResponse]:
        request = ChrysalisMilestoneRequest(network=network, milestone_index=milestone_index)
        return await self._cache.fetch(request, MILESTONE, self._api.milestone_details)

    async def transaction_history(
        self, request: ChrysalisTransactionHistoryRequest
    ) -> Optional[ChrysalisTransactionHistoryResponse]:
        return await self._cache.fetch(request, TRANSACTION_HISTORY, self._api.transaction_history)

    def stale_check(self) -> int:
        """Sweep the shared cache, then the chrysalis cache.

        The protocol store is swept even when the shared sweep fails.
        """
        evicted = 0
        try:
            evicted += self.tangle.stale_check()
        finally:
            evicted += sweep_store(self._store, self.stale_time_seconds, self._clock(), self.metrics)
        return evicted

    def entry_counts(self) -> Dict[str, int]:
        counts = self.tangle.entry_counts()
        counts[self._store.name] = len(self._store)
        return counts
