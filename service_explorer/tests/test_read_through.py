"""
Unit tests for the read-through cache.
"""

import pytest
from unittest.mock import AsyncMock

from service_explorer.app.caching.read_through import QueryPolicy, ReadThroughCache, has_any
from service_explorer.app.caching.store import CacheStore, query_key
from service_explorer.app.models.stardust import (
    NftOutputsRequest,
    NftOutputsResponse,
    OutputDetailsRequest,
    OutputDetailsResponse,
)

OUTPUT = QueryPolicy(
    name="output",
    compute_key=lambda r: query_key("output", r.output_id),
    is_meaningful=lambda r: has_any(r, "output"),
)

NFTS = QueryPolicy(
    name="nft_outputs",
    compute_key=lambda r: query_key("nft-outputs", r.address),
    is_meaningful=lambda r: has_any(r, "outputs"),
)


class TestHasAny:
    """Test cases for has_any."""

    def test_present_field(self):
        assert has_any(OutputDetailsResponse(output={"amount": "1"}), "output")

    def test_all_missing(self):
        assert not has_any(OutputDetailsResponse(), "output")

    def test_error_is_never_meaningful(self):
        response = OutputDetailsResponse(output={"amount": "1"}, error="boom")
        assert not has_any(response, "output")

    def test_empty_collection_counts_as_present(self):
        assert has_any(NftOutputsResponse(outputs={}), "outputs")

    def test_unknown_field_is_missing(self):
        assert not has_any(OutputDetailsResponse(output={}), "block")


class TestReadThroughCache:
    """Test cases for ReadThroughCache."""

    @pytest.fixture
    def store(self, clock):
        return CacheStore(["mainnet"], name="test", clock=clock)

    @pytest.fixture
    def cache(self, store, metrics):
        return ReadThroughCache(store, metrics=metrics)

    @pytest.fixture
    def request_(self):
        return OutputDetailsRequest(network="mainnet", output_id="0x01")

    @pytest.mark.asyncio
    async def test_miss_loads_and_stores(self, cache, store, request_, sample):
        response = OutputDetailsResponse(output={"amount": "10"})
        loader = AsyncMock(return_value=response)

        result = await cache.fetch(request_, OUTPUT, loader)

        assert result == response
        loader.assert_awaited_once_with(request_)
        assert store.get("mainnet", "output:0x01").data == response
        assert sample("cache_lookups_total", cache="test", query="output", result="miss") == 1
        assert sample("cache_writes_total", cache="test", query="output") == 1
        assert sample("cache_entries", cache="test") == 1

    @pytest.mark.asyncio
    async def test_hit_does_not_call_loader(self, cache, store, request_, sample):
        cached = OutputDetailsResponse(output={"amount": "10"})
        store.set("mainnet", "output:0x01", cached)
        loader = AsyncMock()

        result = await cache.fetch(request_, OUTPUT, loader)

        assert result is cached
        loader.assert_not_awaited()
        assert sample("cache_lookups_total", cache="test", query="output", result="hit") == 1

    @pytest.mark.asyncio
    async def test_empty_response_is_not_cached(self, cache, store, request_, sample):
        loader = AsyncMock(return_value=OutputDetailsResponse())

        assert await cache.fetch(request_, OUTPUT, loader) is None
        assert await cache.fetch(request_, OUTPUT, loader) is None

        assert loader.await_count == 2
        assert len(store) == 0
        assert sample("cache_skipped_writes_total", cache="test", query="output", reason="empty") == 2

    @pytest.mark.asyncio
    async def test_error_response_is_returned_but_not_cached(self, cache, store, request_, sample):
        failure = OutputDetailsResponse(error="Output not found", output={"partial": True})
        loader = AsyncMock(return_value=failure)

        result = await cache.fetch(request_, OUTPUT, loader)

        assert result is failure
        assert len(store) == 0
        assert sample("cache_skipped_writes_total", cache="test", query="output", reason="error") == 1

    @pytest.mark.asyncio
    async def test_skip_cache_refreshes_entry(self, cache, store, request_, clock, sample):
        store.set("mainnet", "output:0x01", OutputDetailsResponse(output={"amount": "1"}))
        clock.advance(30)
        fresh = OutputDetailsResponse(output={"amount": "2"})
        loader = AsyncMock(return_value=fresh)

        result = await cache.fetch(request_, OUTPUT, loader, skip_cache=True)

        assert result == fresh
        entry = store.get("mainnet", "output:0x01")
        assert entry.data == fresh
        assert entry.cached_at == clock.now
        assert sample("cache_lookups_total", cache="test", query="output", result="bypass") == 1

    @pytest.mark.asyncio
    async def test_skip_cache_empty_keeps_prior_entry(self, cache, store, request_):
        prior = OutputDetailsResponse(output={"amount": "1"})
        store.set("mainnet", "output:0x01", prior)
        loader = AsyncMock(return_value=OutputDetailsResponse())

        result = await cache.fetch(request_, OUTPUT, loader, skip_cache=True)

        assert result is prior
        assert store.get("mainnet", "output:0x01").data is prior

    @pytest.mark.asyncio
    async def test_empty_collection_is_cached(self, cache, store):
        request = NftOutputsRequest(network="mainnet", address="iota1qq")
        loader = AsyncMock(return_value=NftOutputsResponse(outputs={}))

        await cache.fetch(request, NFTS, loader)
        await cache.fetch(request, NFTS, loader)

        loader.assert_awaited_once()
        assert ("mainnet", "nft-outputs:iota1qq") in store

    @pytest.mark.asyncio
    async def test_loader_exception_propagates(self, cache, store, request_):
        loader = AsyncMock(side_effect=RuntimeError("connection reset"))

        with pytest.raises(RuntimeError):
            await cache.fetch(request_, OUTPUT, loader)

        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_unknown_network_raises_before_loading(self, cache):
        loader = AsyncMock()

        with pytest.raises(KeyError):
            await cache.fetch(OutputDetailsRequest(network="devnet", output_id="0x01"), OUTPUT, loader)

        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_works_without_metrics(self, store, request_):
        cache = ReadThroughCache(store)
        loader = AsyncMock(return_value=OutputDetailsResponse(output={}))

        assert await cache.fetch(request_, OUTPUT, loader) is not None
