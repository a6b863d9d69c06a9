"""
Gateway client for stardust networks.
"""

from ..models.stardust import (
    AddressBalanceRequest,
    AddressBalanceResponse,
    AliasRequest,
    AliasResponse,
    AssociatedOutputsRequest,
    AssociatedOutputsResponse,
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
from .api_client import ApiClient, path_segment as seg


class StardustApiClient(ApiClient):
    """Stardust endpoints of the explorer gateway."""

    async def search(self, request: SearchRequest) -> SearchResponse:
        data = await self.call_api(
            "search",
            f"stardust/search/{seg(request.network)}/{seg(request.query)}",
            params={"cursor": request.cursor},
        )
        return self.parse_response(SearchResponse, data)

    async def block_details(self, request: BlockDetailsRequest) -> BlockDetailsResponse:
        data = await self.call_api("block", f"stardust/block/{seg(request.network)}/{seg(request.block_id)}")
        return self.parse_response(BlockDetailsResponse, data)

    async def transaction_included_block_details(
        self, request: TransactionDetailsRequest
    ) -> TransactionDetailsResponse:
        data = await self.call_api(
            "transaction",
            f"stardust/transaction/{seg(request.network)}/{seg(request.transaction_id)}",
        )
        return self.parse_response(TransactionDetailsResponse, data)

    async def output_details(self, request: OutputDetailsRequest) -> OutputDetailsResponse:
        data = await self.call_api("output", f"stardust/output/{seg(request.network)}/{seg(request.output_id)}")
        return self.parse_response(OutputDetailsResponse, data)

    async def associated_outputs(self, request: AssociatedOutputsRequest) -> AssociatedOutputsResponse:
        data = await self.call_api(
            "associated_outputs",
            f"stardust/output/associated/{seg(request.network)}/{seg(request.address_details.bech32)}",
            method="post",
            payload={"addressDetails": request.address_details.to_payload()},
        )
        return self.parse_response(AssociatedOutputsResponse, data)

    async def milestone_details(self, request: MilestoneDetailsRequest) -> MilestoneDetailsResponse:
        data = await self.call_api(
            "milestone",
            f"stardust/milestone/{seg(request.network)}/{request.milestone_index}",
        )
        return self.parse_response(MilestoneDetailsResponse, data)

    async def milestone_stats(self, request: MilestoneDetailsRequest) -> MilestoneStatsResponse:
        """Get the chronicle analytics of a milestone."""
        data = await self.call_api(
            "milestone_stats",
            f"stardust/milestone/stats/{seg(request.network)}/{request.milestone_index}",
        )
        return self.parse_response(MilestoneStatsResponse, data)

    async def transaction_history(self, request: TransactionHistoryRequest) -> TransactionHistoryResponse:
        """Get one page of the transaction history of an address (chronicle)."""
        data = await self.call_api(
            "transaction_history",
            f"stardust/transactionhistory/{seg(request.network)}/{seg(request.address)}",
            params={
                "pageSize": request.page_size,
                "sort": request.sort,
                "startMilestoneIndex": request.start_milestone_index,
                "cursor": request.cursor,
            },
        )
        return self.parse_response(TransactionHistoryResponse, data)

    async def nft_outputs(self, request: NftOutputsRequest) -> NftOutputsResponse:
        data = await self.call_api("nft_outputs", f"stardust/nfts/{seg(request.network)}/{seg(request.address)}")
        return self.parse_response(NftOutputsResponse, data)

    async def nft_details(self, request: NftDetailsRequest) -> NftDetailsResponse:
        data = await self.call_api("nft", f"stardust/nft/{seg(request.network)}/{seg(request.nft_id)}")
        return self.parse_response(NftDetailsResponse, data)

    async def nft_registry_details(self, request: NftDetailsRequest) -> NftRegistryDetailsResponse:
        """Get the registry metadata of an NFT (mock registry)."""
        data = await self.call_api(
            "nft_registry",
            f"stardust/nft/registry/{seg(request.network)}/{seg(request.nft_id)}",
        )
        return self.parse_response(NftRegistryDetailsResponse, data)

    async def alias_details(self, request: AliasRequest) -> AliasResponse:
        data = await self.call_api("alias", f"stardust/alias/{seg(request.network)}/{seg(request.alias_id)}")
        return self.parse_response(AliasResponse, data)

    async def alias_foundries(self, request: FoundriesRequest) -> FoundriesResponse:
        """Get the foundries controlled by an alias address."""
        data = await self.call_api(
            "alias_foundries",
            f"stardust/alias/foundries/{seg(request.network)}/{seg(request.alias_address)}",
        )
        return self.parse_response(FoundriesResponse, data)

    async def foundry_details(self, request: FoundryRequest) -> FoundryResponse:
        data = await self.call_api("foundry", f"stardust/foundry/{seg(request.network)}/{seg(request.foundry_id)}")
        return self.parse_response(FoundryResponse, data)

    async def address_balance(self, request: AddressBalanceRequest) -> AddressBalanceResponse:
        data = await self.call_api("balance", f"stardust/balance/{seg(request.network)}/{seg(request.address)}")
        return self.parse_response(AddressBalanceResponse, data)

    async def address_balance_from_chronicle(self, request: AddressBalanceRequest) -> AddressBalanceResponse:
        data = await self.call_api(
            "balance_chronicle",
            f"stardust/balance/chronicle/{seg(request.network)}/{seg(request.address)}",
        )
        return self.parse_response(AddressBalanceResponse, data)
