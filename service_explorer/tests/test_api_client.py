"""
Unit tests for the explorer gateway clients.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from shared.errors import ExternalServiceError
from service_explorer.app.adapters.api_client import ApiClient, path_segment
from service_explorer.app.adapters.chrysalis_api_client import ChrysalisApiClient
from service_explorer.app.adapters.stardust_api_client import StardustApiClient
from service_explorer.app.models.chrysalis import ChrysalisSearchRequest
from service_explorer.app.models.common import BaseTokenRequest, NetworkStatsRequest
from service_explorer.app.models.stardust import (
    AssociatedOutputsRequest,
    Bech32AddressDetails,
    MilestoneDetailsRequest,
    SearchRequest,
    TransactionHistoryRequest,
)

ENDPOINT = "http://localhost:4000"


def json_response(payload, status_code=200, method="GET", url=ENDPOINT):
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(payload),
        request=httpx.Request(method, url),
    )


def test_path_segment_escapes_separators():
    assert path_segment("a/b c") == "a%2Fb%20c"
    assert path_segment(12) == "12"


class TestApiClient:
    """Test cases for ApiClient."""

    @pytest.fixture
    def client(self):
        return ApiClient(ENDPOINT + "/", max_retries=3, backoff_seconds=0)

    @pytest.mark.asyncio
    async def test_base_token_info(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"name": "IOTA", "tickerSymbol": "MIOTA", "decimals": 6})
            )

            result = await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert result.name == "IOTA"
        assert result.ticker_symbol == "MIOTA"
        request.assert_awaited_once_with("GET", f"{ENDPOINT}/token/mainnet", params=None, json=None)

    @pytest.mark.asyncio
    async def test_stats_sends_history_flag(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"itemsPerSecond": 4.2})
            )

            result = await client.stats(NetworkStatsRequest(network="shimmer", include_history=True))

        assert result.items_per_second == 4.2
        assert request.await_args.kwargs["params"] == {"includeHistory": "true"}

    @pytest.mark.asyncio
    async def test_soft_error_is_returned(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"error": "Network not found"})
            )

            result = await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert result.error == "Network not found"

    @pytest.mark.asyncio
    async def test_unknown_fields_are_kept(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"name": "IOTA", "extraField": 1})
            )

            result = await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert result.to_payload() == {"name": "IOTA", "extraField": 1}

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                side_effect=[
                    httpx.ConnectError("connection refused"),
                    json_response({"name": "IOTA"}),
                ]
            )

            result = await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert result.name == "IOTA"
        assert request.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert request.await_count == 3
        assert exc_info.value.status_code == 502
        assert exc_info.value.details["attempts"] == 3

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                side_effect=[
                    json_response({}, status_code=503),
                    json_response({}, status_code=500),
                    json_response({"name": "IOTA"}),
                ]
            )

            result = await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert result.name == "IOTA"
        assert request.await_count == 3

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"message": "bad"}, status_code=400)
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await client.base_token_info(BaseTokenRequest(network="mainnet"))

        request.assert_awaited_once()
        assert exc_info.value.details["status_code"] == 400

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=httpx.Response(200, content=b"<html>", request=httpx.Request("GET", ENDPOINT))
            )

            with pytest.raises(ExternalServiceError):
                await client.base_token_info(BaseTokenRequest(network="mainnet"))

    @pytest.mark.asyncio
    async def test_non_object_body(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(return_value=json_response([1, 2]))

            with pytest.raises(ExternalServiceError):
                await client.base_token_info(BaseTokenRequest(network="mainnet"))

    @pytest.mark.asyncio
    async def test_records_metrics(self, metrics, sample):
        client = ApiClient(ENDPOINT, metrics=metrics)
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"name": "IOTA"})
            )

            await client.base_token_info(BaseTokenRequest(network="mainnet"))

        assert sample("api_requests_total", endpoint="token", status="200") == 1


class TestStardustApiClient:
    """Test cases for StardustApiClient paths."""

    @pytest.fixture
    def client(self):
        return StardustApiClient(ENDPOINT, backoff_seconds=0)

    @pytest.mark.asyncio
    async def test_search_escapes_query(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"did": "did:iota:0x01"})
            )

            result = await client.search(SearchRequest(network="mainnet", query="did:iota/0x01"))

        assert result.did == "did:iota:0x01"
        request.assert_awaited_once_with(
            "GET", f"{ENDPOINT}/stardust/search/mainnet/did%3Aiota%2F0x01", params=None, json=None
        )

    @pytest.mark.asyncio
    async def test_associated_outputs_posts_address_details(self, client):
        details = Bech32AddressDetails(bech32="iota1qq", hex="0x00", type=0, type_label="Ed25519")
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"outputs": []})
            )

            result = await client.associated_outputs(AssociatedOutputsRequest(network="mainnet", address_details=details))

        assert result.outputs == []
        request.assert_awaited_once_with(
            "POST",
            f"{ENDPOINT}/stardust/output/associated/mainnet/iota1qq",
            params=None,
            json={"addressDetails": {"bech32": "iota1qq", "hex": "0x00", "type": 0, "typeLabel": "Ed25519"}},
        )

    @pytest.mark.asyncio
    async def test_transaction_history_params(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"items": [], "cursor": "c2"})
            )

            result = await client.transaction_history(
                TransactionHistoryRequest(network="mainnet", address="iota1qq", page_size=10, sort="newest")
            )

        assert result.cursor == "c2"
        assert request.await_args.args[1] == f"{ENDPOINT}/stardust/transactionhistory/mainnet/iota1qq"
        assert request.await_args.kwargs["params"] == {"pageSize": 10, "sort": "newest"}

    @pytest.mark.asyncio
    async def test_malformed_body_is_external_error(self, client):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"milestone": "not-an-object"})
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await client.milestone_details(MilestoneDetailsRequest(network="mainnet", milestone_index=5))

        assert exc_info.value.status_code == 502
        assert exc_info.value.details["model"] == "MilestoneDetailsResponse"
        assert exc_info.value.details["fields"] == ["milestone"]


class TestChrysalisApiClient:
    """Test cases for ChrysalisApiClient paths."""

    @pytest.mark.asyncio
    async def test_search(self):
        client = ChrysalisApiClient(ENDPOINT)
        with patch("httpx.AsyncClient") as mock_client:
            request = mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"message": {"networkId": "1"}})
            )

            result = await client.search(ChrysalisSearchRequest(network="chrysalis-mainnet", query="0xmsg"))

        assert result.message == {"networkId": "1"}
        assert request.await_args.args[1] == f"{ENDPOINT}/search/chrysalis-mainnet/0xmsg"

    @pytest.mark.asyncio
    async def test_search_status_message(self):
        client = ChrysalisApiClient(ENDPOINT)
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=json_response({"error": "Not found", "message": "No results"})
            )

            result = await client.search(ChrysalisSearchRequest(network="chrysalis-mainnet", query="0xmsg"))

        assert result.error == "Not found"
        assert result.message == "No results"
