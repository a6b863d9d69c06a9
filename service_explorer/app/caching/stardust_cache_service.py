"""
Tangle cache for stardust networks.
"""

import time
from typing import Callable, Dict, Iterable, Optional, TYPE_CHECKING

from shared.logging import get_logger

from ..adapters.api_client import ApiClient
from ..adapters.stardust_api_client import StardustApiClient
from ..models.common import BaseTokenInfoResponse, NetworkStatsResponse
from ..models.stardust import (
    AddressBalanceRequest,
    AddressBalanceResponse,
    AliasRequest,
    AliasResponse,
    AssociatedOutputsRequest,
    AssociatedOutputsResponse,
    Bech32AddressDetails,
    BlockDetailsRequest,
    BlockDetailsResponse,
    FoundriesRequest,
    FoundriesResponse,
    FoundryRequest,
    FoundryResponse,
    MilestoneDetailsRequest,
    MilestoneDetailsResponse,
    MilestoneStatsResponse,
    NftDetailsRequest,
    NftDetailsResponse,
    NftOutputsRequest,
    NftOutputsResponse,
    NftRegistryDetailsResponse,
    OutputDetailsRequest,
    OutputDetailsResponse,
    SearchRequest,
    SearchResponse,
    TransactionDetailsRequest,
    TransactionDetailsResponse,
    TransactionHistoryRequest,
    TransactionHistoryResponse,
)
from .read_through import QueryPolicy, ReadThroughCache, meaningful_when_any
from .store import CacheStore, query_key
from .sweeper import StalenessSweeper, sweep_store
from .tangle_cache_service import DEFAULT_STALE_TIME, DEFAULT_SWEEP_INTERVAL, TangleCacheService

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


SEARCH = QueryPolicy(
    name="search",
    compute_key=lambda r: query_key("search", r.query, r.cursor),
    is_meaningful=meaningful_when_any(
        "address_details",
        "block",
        "milestone",
        "output",
        "tagged_outputs",
        "transaction_block",
        "alias_id",
        "foundry_id",
        "nft_id",
        "did",
        "address_output_ids",
    ),
)

BLOCK = QueryPolicy(
    name="block",
    compute_key=lambda r: query_key("block", r.block_id),
    is_meaningful=meaningful_when_any("block", "metadata"),
)

TRANSACTION_BLOCK = QueryPolicy(
    name="transaction_block",
    compute_key=lambda r: query_key("transaction-block", r.transaction_id),
    is_meaningful=meaningful_when_any("block"),
)

OUTPUT = QueryPolicy(
    name="output",
    compute_key=lambda r: query_key("output", r.output_id),
    is_meaningful=meaningful_when_any("output"),
)

ASSOCIATED_OUTPUTS = QueryPolicy(
    name="associated_outputs",
    compute_key=lambda r: query_key("associated-outputs", r.address_details.bech32),
    is_meaningful=meaningful_when_any("outputs"),
)

MILESTONE = QueryPolicy(
    name="milestone",
    compute_key=lambda r: query_key("milestone", r.milestone_index),
    is_meaningful=meaningful_when_any("milestone"),
)

MILESTONE_STATS = QueryPolicy(
    name="milestone_stats",
    compute_key=lambda r: query_key("milestone-stats", r.milestone_index),
    is_meaningful=meaningful_when_any("blocks_count", "per_payload_type", "per_inclusion_state"),
)

TRANSACTION_HISTORY = QueryPolicy(
    name="transaction_history",
    compute_key=lambda r: query_key(
        "history", r.address, r.cursor, r.page_size, r.sort, r.start_milestone_index
    ),
    is_meaningful=meaningful_when_any("items"),
)

NFT_OUTPUTS = QueryPolicy(
    name="nft_outputs",
    compute_key=lambda r: query_key("nft-outputs", r.address),
    is_meaningful=meaningful_when_any("outputs"),
)

FOUNDRIES = QueryPolicy(
    name="foundries",
    compute_key=lambda r: query_key("foundries", r.alias_address),
    is_meaningful=meaningful_when_any("foundry_outputs_response"),
)

ALIAS = QueryPolicy(
    name="alias",
    compute_key=lambda r: query_key("alias", r.alias_id),
    is_meaningful=meaningful_when_any("alias_details"),
)

FOUNDRY = QueryPolicy(
    name="foundry",
    compute_key=lambda r: query_key("foundry", r.foundry_id),
    is_meaningful=meaningful_when_any("foundry_details"),
)

NFT_DETAILS = QueryPolicy(
    name="nft_details",
    compute_key=lambda r: query_key("nft-details", r.nft_id),
    is_meaningful=meaningful_when_any("nft_details"),
)

NFT_REGISTRY = QueryPolicy(
    name="nft_registry",
    compute_key=lambda r: query_key("nft-registry", r.nft_id),
    is_meaningful=meaningful_when_any("name", "image", "description", "issuer_name", "collection_name"),
)


class StardustTangleCacheService:
    """Cache tangle requests for stardust.

    Holds a protocol-independent ``TangleCacheService`` for the shared lookups
    and its own store for stardust queries. One sweeper drives both.
    """

    def __init__(
        self,
        api: StardustApiClient,
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
            name="stardust_shared",
            sweeper=False,
            clock=clock,
            metrics=metrics,
        )
        self._store = CacheStore(networks, name="stardust", clock=clock)
        self._cache = ReadThroughCache(self._store, metrics=metrics)
        self.sweeper = StalenessSweeper(self.stale_check, sweep_interval_seconds, name="stardust")
        self.logger = get_logger("explorer.stardust_cache")
        self.logger.debug("Stardust cache created", networks=networks, stale_time_seconds=stale_time_seconds)

    async def start(self):
        await self.sweeper.start()

    async def stop(self):
        await self.sweeper.stop()

    async def __aenter__(self) -> "StardustTangleCacheService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def base_token_info(self, network: str, skip_cache: bool = False) -> Optional[BaseTokenInfoResponse]:
        return await self.tangle.base_token_info(network, skip_cache=skip_cache)

    async def network_stats(self, network: str, include_history: bool = False) -> Optional[NetworkStatsResponse]:
        return await self.tangle.network_stats(network, include_history=include_history)

    async def search(self, network: str, query: str, cursor: Optional[str] = None) -> Optional[SearchResponse]:
        """Search for items on the network.

        Any single populated result field qualifies the whole response for
        caching under the query and cursor.
        """
        request = SearchRequest(network=network, query=query, cursor=cursor)
        return await self._cache.fetch(request, SEARCH, self._api.search)

    async def block_details(self, network: str, block_id: str) -> Optional[BlockDetailsResponse]:
        request = BlockDetailsRequest(network=network, block_id=block_id)
        return await self._cache.fetch(request, BLOCK, self._api.block_details)

    async def transaction_included_block_details(
        self, network: str, transaction_id: str
    ) -> Optional[TransactionDetailsResponse]:
        """Get the block that included a transaction."""
        request = TransactionDetailsRequest(network=network, transaction_id=transaction_id)
        return await self._cache.fetch(request, TRANSACTION_BLOCK, self._api.transaction_included_block_details)

    async def output_details(self, network: str, output_id: str) -> Optional[OutputDetailsResponse]:
        request = OutputDetailsRequest(network=network, output_id=output_id)
        return await self._cache.fetch(request, OUTPUT, self._api.output_details)

    async def associated_outputs(
        self, network: str, address_details: Bech32AddressDetails
    ) -> Optional[AssociatedOutputsResponse]:
        """Get the outputs associated with an address."""
        request = AssociatedOutputsRequest(network=network, address_details=address_details)
        return await self._cache.fetch(request, ASSOCIATED_OUTPUTS, self._api.associated_outputs)

    async def milestone_details(self, network: str, milestone_index: int) -> Optional[MilestoneDetailsResponse]:
        request = MilestoneDetailsRequest(network=network, milestone_index=milestone_index)
        return await self._cache.fetch(request, MILESTONE, self._api.milestone_details)

    async def milestone_stats(self, network: str, milestone_index: int) -> Optional[MilestoneStatsResponse]:
        request = MilestoneDetailsRequest(network=network, milestone_index=milestone_index)
        return await self._cache.fetch(request, MILESTONE_STATS, self._api.milestone_stats)

    async def transaction_history(self, request: TransactionHistoryRequest) -> Optional[TransactionHistoryResponse]:
        """Get one page of the transaction history of an address.

        Each cursor is cached as its own page; fetching a new page never
        invalidates the ones before it.
        """
        return await self._cache.fetch(request, TRANSACTION_HISTORY, self._api.transaction_history)

    async def nfts(self, request: NftOutputsRequest, skip_cache: bool = False) -> Optional[NftOutputsResponse]:
        """Get the NFT outputs of an address."""
        return await self._cache.fetch(request, NFT_OUTPUTS, self._api.nft_outputs, skip_cache=skip_cache)

    async def foundries_by_alias_address(
        self, request: FoundriesRequest, skip_cache: bool = False
    ) -> Optional[FoundriesResponse]:
        """Get the foundry outputs controlled by an alias address."""
        return await self._cache.fetch(request, FOUNDRIES, self._api.alias_foundries, skip_cache=skip_cache)

    async def alias_details(self, request: AliasRequest, skip_cache: bool = False) -> Optional[AliasResponse]:
        return await self._cache.fetch(request, ALIAS, self._api.alias_details, skip_cache=skip_cache)

    async def foundry_details(self, request: FoundryRequest, skip_cache: bool = False) -> Optional[FoundryResponse]:
        return await self._cache.fetch(request, FOUNDRY, self._api.foundry_details, skip_cache=skip_cache)

    async def nft_details(self, request: NftDetailsRequest, skip_cache: bool = False) -> Optional[NftDetailsResponse]:
        return await self._cache.fetch(request, NFT_DETAILS, self._api.nft_details, skip_cache=skip_cache)

    async def nft_registry_details(
        self, request: NftDetailsRequest, skip_cache: bool = False
    ) -> Optional[NftRegistryDetailsResponse]:
        return await self._cache.fetch(request, NFT_REGISTRY, self._api.nft_registry_details, skip_cache=skip_cache)

    async def address_balance(self, network: str, address: str) -> AddressBalanceResponse:
        """Get the balance of an address from the node; never cached."""
        return await self._api.address_balance(AddressBalanceRequest(network=network, address=address))

    async def address_balance_from_chronicle(self, network: str, address: str) -> AddressBalanceResponse:
        """Get the balance of an address from chronicle; never cached."""
        return await self._api.address_balance_from_chronicle(AddressBalanceRequest(network=network, address=address))

    def stale_check(self) -> int:
        """Sweep the shared cache, then the stardust cache.

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
