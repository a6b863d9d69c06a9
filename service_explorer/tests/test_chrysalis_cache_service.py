"""
Unit tests for the chrysalis tangle cache.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from service_explorer.app.caching.chrysalis_cache_service import ChrysalisTangleCacheService
from service_explorer.app.models.chrysalis import (
    ChrysalisMilestoneRequest,
    ChrysalisMilestoneResponse,
    ChrysalisSearchResponse,
    ChrysalisTransactionHistoryRequest,
    ChrysalisTransactionHistoryResponse,
)
from service_explorer.app.models.common import NetworkStatsResponse


class TestChrysalisTangleCacheService:
    """Test cases for ChrysalisTangleCacheService."""

    @pytest.fixture
    def api(self):
        return AsyncMock()

    @pytest.fixture
    def service(self, api, clock):
        return ChrysalisTangleCacheService(api, ["chrysalis-mainnet"], stale_time_seconds=60, clock=clock)

    @pytest.mark.asyncio
    async def test_search_message_is_cached(self, service, api):
        api.search.return_value = ChrysalisSearchResponse(message={"networkId": "1"})

        await service.search("chrysalis-mainnet", "0xmsg")
        result = await service.search("chrysalis-mainnet", "0xmsg")

        assert result.message == {"networkId": "1"}
        api.search.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_search_indexation_is_cached(self, service, api):
        api.search.return_value = ChrysalisSearchResponse(indexed_message_ids=[], indexed_message_type="hex")

        await service.search("chrysalis-mainnet", "tag")
        await service.search("chrysalis-mainnet", "tag")

        api.search.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_search_without_results(self, service, api):
        api.search.return_value = ChrysalisSearchResponse(indexed_message_type="utf8")

        assert await service.search("chrysalis-mainnet", "nothing") is None
        assert await service.search("chrysalis-mainnet", "nothing") is None
        assert api.search.await_count == 2

    @pytest.mark.asyncio
    async def test_milestone_details(self, service, api):
        api.milestone_details.return_value = ChrysalisMilestoneResponse(milestone={"index": 100})

        await service.milestone_details("chrysalis-mainnet", 100)
        await service.milestone_details("chrysalis-mainnet", 100)

        api.milestone_details.assert_awaited_once_with(
            ChrysalisMilestoneRequest(network="chrysalis-mainnet", milestone_index=100)
        )

    @pytest.mark.asyncio
    async def test_transaction_history_pages(self, service, api):
        api.transaction_history.side_effect = [
            ChrysalisTransactionHistoryResponse(history=[{"messageId": "0x01"}], state={"cursor": "c2"}),
            ChrysalisTransactionHistoryResponse(history=[{"messageId": "0x02"}]),
        ]

        first = ChrysalisTransactionHistoryRequest(network="chrysalis-mainnet", address="iota1qq", page_size=10)
        second = ChrysalisTransactionHistoryRequest(
            network="chrysalis-mainnet", address="iota1qq", page_size=10, cursor="c2"
        )

        await service.transaction_history(first)
        await service.transaction_history(second)
        again = await service.transaction_history(first)

        assert again.history == [{"messageId": "0x01"}]
        assert api.transaction_history.await_count == 2

    @pytest.mark.asyncio
    async def test_shared_lookups_and_sweep(self, service, api, clock):
        api.stats.return_value = NetworkStatsResponse(items_per_second=3.0)
        api.milestone_details.return_value = ChrysalisMilestoneResponse(milestone={"index": 1})

        await service.network_stats("chrysalis-mainnet")
        await service.milestone_details("chrysalis-mainnet", 1)
        assert service.entry_counts() == {"chrysalis_shared": 1, "chrysalis": 1}

        clock.advance(120)
        assert service.stale_check() == 2

    @pytest.mark.asyncio
    async def test_context_manager(self, service):
        async with service:
            assert service.sweeper.running is True

        assert service.sweeper.running is False

    @pytest.mark.asyncio
    async def test_search_status_message_is_not_cached(self, service, api):
        api.search.return_value = ChrysalisSearchResponse(error="Not found", message="No results")

        result = await service.search("chrysalis-mainnet", "0xmissing")
        await service.search("chrysalis-mainnet", "0xmissing")

        assert result.error == "Not found"
        assert result.message == "No results"
        assert api.search.await_count == 2
        assert service.entry_counts()["chrysalis"] == 0

    @pytest.mark.asyncio
    async def test_search_status_message_without_error(self, service, api):
        api.search.return_value = ChrysalisSearchResponse(message="No results")

        assert await service.search("chrysalis-mainnet", "0xmissing") is None
        assert service.entry_counts()["chrysalis"] == 0

    @pytest.mark.asyncio
    async def test_stale_check_sweeps_chrysalis_store_when_shared_sweep_fails(self, service, api, clock):
        api.milestone_details.return_value = ChrysalisMilestoneResponse(milestone={"index": 1})
        await service.milestone_details("chrysalis-mainnet", 1)
        service.tangle.stale_check = MagicMock(side_effect=RuntimeError("boom"))

        clock.advance(120)
        with pytest.raises(RuntimeError):
            service.stale_check()

        assert service.entry_counts()["chrysalis"] == 0

    @pytest.mark.asyncio
    async def test_shared_cache_has_no_sweeper(self, service):
        assert service.tangle.sweeper is None

        async with service:
            assert service.sweeper.running is True
