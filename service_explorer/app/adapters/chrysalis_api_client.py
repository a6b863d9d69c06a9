"""
Gateway client for chrysalis networks.
"""

from ..models.chrysalis import (
    ChrysalisMilestoneRequest,
    ChrysalisMilestoneResponse,
    ChrysalisSearchRequest,
    ChrysalisSearchResponse,
    ChrysalisTransactionHistoryRequest,
    ChrysalisTransactionHistoryResponse,
)
from .api_client import ApiClient, path_segment as seg


class ChrysalisApiClient(ApiClient):
    """Chrysalis endpoints of the explorer gateway."""

    async def search(self, request: ChrysalisSearchRequest) -> ChrysalisSearchResponse:
        data = await self.call_api(
            "chrysalis_search",
            f"search/{seg(request.network)}/{seg(request.query)}",
            params={"cursor": request.cursor},
        )
        return self.parse_response(ChrysalisSearchResponse, data)

    async def milestone_details(self, request: ChrysalisMilestoneRequest) -> ChrysalisMilestoneResponse:
        data = await self.call_api(
            "chrysalis_milestone",
            f"milestone/{seg(request.network)}/{request.milestone_index}",
        )
        return self.parse_response(ChrysalisMilestoneResponse, data)

    async def transaction_history(
        self, request: ChrysalisTransactionHistoryRequest
    ) -> ChrysalisTransactionHistoryResponse:
        data = await self.call_api(
            "chrysalis_transaction_history",
            f"transactionhistory/{seg(request.network)}/{seg(request.address)}",
            params={"pageSize": request.page_size, "cursor": request.cursor},
        )
        return self.parse_response(ChrysalisTransactionHistoryResponse, data)
