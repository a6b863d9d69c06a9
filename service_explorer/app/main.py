"""
Explorer service: HTTP front of the tangle cache.
"""

from typing import Any, Dict, Optional, Union

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ValidationError
from shared.logging import set_network_context

from .adapters.chrysalis_api_client import ChrysalisApiClient
from .adapters.stardust_api_client import StardustApiClient
from .caching.chrysalis_cache_service import ChrysalisTangleCacheService
from .caching.stardust_cache_service import StardustTangleCacheService
from .models.chrysalis import ChrysalisTransactionHistoryRequest
from .models.common import ApiResponse
from .models.stardust import (
    AliasRequest,
    AssociatedOutputsBody,
    Bech32AddressDetails,
    FoundriesRequest,
    FoundryRequest,
    NftDetailsRequest,
    NftOutputsRequest,
    TransactionHistoryRequest,
)
from .networks import CHRYSALIS, STARDUST, NetworkRegistry, load_network_registry

CacheService = Union[StardustTangleCacheService, ChrysalisTangleCacheService]


def render(response: Optional[ApiResponse]) -> Dict[str, Any]:
    """Serialize a cache result; nothing found renders as an empty object."""
    if response is None:
        return {}
    return response.to_payload()


class ExplorerService(BaseService):
    """Explorer service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        registry: Optional[NetworkRegistry] = None,
        stardust_api: Optional[StardustApiClient] = None,
        chrysalis_api: Optional[ChrysalisApiClient] = None,
    ):
        super().__init__("explorer", 8000, config)
        self.registry = registry or load_network_registry(self.config.networks_file)

        client_options = {
            "timeout": self.config.request_timeout,
            "max_retries": self.config.request_retries,
            "backoff_seconds": self.config.request_backoff_seconds,
            "metrics": self.metrics,
        }
        cache_options = {
            "stale_time_seconds": self.config.stale_time_seconds,
            "sweep_interval_seconds": self.config.sweep_interval_seconds,
            "metrics": self.metrics,
        }

        self.stardust = StardustTangleCacheService(
            stardust_api or StardustApiClient(self.config.api_endpoint, **client_options),
            [network.network for network in self.registry.for_protocol(STARDUST)],
            **cache_options,
        )
        self.chrysalis = ChrysalisTangleCacheService(
            chrysalis_api or ChrysalisApiClient(self.config.api_endpoint, **client_options),
            [network.network for network in self.registry.for_protocol(CHRYSALIS)],
            **cache_options,
        )
        self.cache_services: Dict[str, CacheService] = {
            STARDUST: self.stardust,
            CHRYSALIS: self.chrysalis,
        }

        @self.app.on_event("startup")
        async def _startup():
            for service in self.cache_services.values():
                await service.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            for service in self.cache_services.values():
                await service.stop()

        self._setup_explorer_routes()
        self._setup_stardust_routes()
        self._setup_chrysalis_routes()

    def _service_for(self, network: str) -> CacheService:
        """Resolve the cache service that owns ``network``."""
        config = self.registry.get(network)
        service = self.cache_services.get(config.protocol_version)
        if service is None:
            raise ValidationError(
                f"Network '{network}' uses protocol '{config.protocol_version}' which has no tangle cache",
                details={"network": network, "protocol_version": config.protocol_version},
            )
        set_network_context(network)
        return service

    def _require(self, network: str, protocol_version: str) -> None:
        config = self.registry.get(network)
        if config.protocol_version != protocol_version:
            raise ValidationError(
                f"Network '{network}' is not a {protocol_version} network",
                details={"network": network, "protocol_version": config.protocol_version},
            )
        set_network_context(network)

    async def _check_dependencies(self) -> Dict[str, str]:
        return {
            name: "running" if service.sweeper.running else "stopped"
            for name, service in self.cache_services.items()
        }

    def _setup_explorer_routes(self):
        """Set up protocol-independent routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "explorer",
                "message": "Tangle Explorer - Explorer Service",
                "version": "1.0.0",
            }

        @self.app.get("/networks")
        async def list_networks():
            """List the visible networks."""
            return {
                "networks": [
                    config.model_dump(by_alias=True, exclude_none=True)
                    for config in self.registry.networks()
                    if not config.is_hidden
                ]
            }

        @self.app.get("/api/v1/cache/stats")
        async def get_cache_stats():
            """Entry counts per cache store."""
            stores: Dict[str, int] = {}
            for service in self.cache_services.values():
                stores.update(service.entry_counts())
            return {
                "stores": stores,
                "stale_time_seconds": self.config.stale_time_seconds,
                "sweep_interval_seconds": self.config.sweep_interval_seconds,
            }

        @self.app.get("/token/{network}")
        async def get_base_token(network: str, skip_cache: bool = Query(False, alias="skipCache")):
            service = self._service_for(network)
            return render(await service.base_token_info(network, skip_cache=skip_cache))

        @self.app.get("/stats/{network}")
        async def get_network_stats(network: str, include_history: bool = Query(False, alias="includeHistory")):
            service = self._service_for(network)
            return render(await service.network_stats(network, include_history=include_history))

    def _setup_stardust_routes(self):
        """Set up stardust routes."""

        @self.app.get("/stardust/search/{network}/{query}")
        async def stardust_search(network: str, query: str, cursor: Optional[str] = None):
            self._require(network, STARDUST)
            return render(await self.stardust.search(network, query, cursor))

        @self.app.get("/stardust/block/{network}/{block_id}")
        async def stardust_block(network: str, block_id: str):
            self._require(network, STARDUST)
            return render(await self.stardust.block_details(network, block_id))

        @self.app.get("/stardust/transaction/{network}/{transaction_id}")
        async def stardust_transaction(network: str, transaction_id: str):
            self._require(network, STARDUST)
            return render(await self.stardust.transaction_included_block_details(network, transaction_id))

        @self.app.get("/stardust/output/{network}/{output_id}")
        async def stardust_output(network: str, output_id: str):
            self._require(network, STARDUST)
            return render(await self.stardust.output_details(network, output_id))

        @self.app.post("/stardust/output/associated/{network}/{address}")
        async def stardust_associated_outputs(
            network: str,
            address: str,
            body: Optional[AssociatedOutputsBody] = None,
        ):
            self._require(network, STARDUST)
            details = body.address_details if body else Bech32AddressDetails(bech32=address)
            if details.bech32 != address:
                raise ValidationError(
                    "Address in body does not match the path",
                    details={"address": address, "bech32": details.bech32},
                )
            return render(await self.stardust.associated_outputs(network, details))

        @self.app.get("/stardust/milestone/{network}/{milestone_index}")
        async def stardust_milestone(network: str, milestone_index: int):
            self._require(network, STARDUST)
            return render(await self.stardust.milestone_details(network, milestone_index))

        @self.app.get("/stardust/milestone/stats/{network}/{milestone_index}")
        async def stardust_milestone_stats(network: str, milestone_index: int):
            self._require(network, STARDUST)
            return render(await self.stardust.milestone_stats(network, milestone_index))

        @self.app.get("/stardust/transactionhistory/{network}/{address}")
        async def stardust_transaction_history(
            network: str,
            address: str,
            page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
            sort: Optional[str] = Query(None),
            start_milestone_index: Optional[int] = Query(None, alias="startMilestoneIndex"),
            cursor: Optional[str] = Query(None),
        ):
            self._require(network, STARDUST)
            request = TransactionHistoryRequest(
                network=network,
                address=address,
                page_size=page_size,
                sort=sort,
                start_milestone_index=start_milestone_index,
                cursor=cursor,
            )
            return render(await self.stardust.transaction_history(request))

        @self.app.get("/stardust/nfts/{network}/{address}")
        async def stardust_nfts(network: str, address: str, skip_cache: bool = Query(False, alias="skipCache")):
            self._require(network, STARDUST)
            request = NftOutputsRequest(network=network, address=address)
            return render(await self.stardust.nfts(request, skip_cache=skip_cache))

        @self.app.get("/stardust/nft/registry/{network}/{nft_id}")
        async def stardust_nft_registry(
            network: str, nft_id: str, skip_cache: bool = Query(False, alias="skipCache")
        ):
            self._require(network, STARDUST)
            request = NftDetailsRequest(network=network, nft_id=nft_id)
            return render(await self.stardust.nft_registry_details(request, skip_cache=skip_cache))

        @self.app.get("/stardust/nft/{network}/{nft_id}")
        async def stardust_nft(network: str, nft_id: str, skip_cache: bool = Query(False, alias="skipCache")):
            self._require(network, STARDUST)
            request = NftDetailsRequest(network=network, nft_id=nft_id)
            return render(await self.stardust.nft_details(request, skip_cache=skip_cache))

        @self.app.get("/stardust/alias/foundries/{network}/{alias_address}")
        async def stardust_alias_foundries(
            network: str, alias_address: str, skip_cache: bool = Query(False, alias="skipCache")
        ):
            self._require(network, STARDUST)
            request = FoundriesRequest(network=network, alias_address=alias_address)
            return render(await self.stardust.foundries_by_alias_address(request, skip_cache=skip_cache))

        @self.app.get("/stardust/alias/{network}/{alias_id}")
        async def stardust_alias(network: str, alias_id: str, skip_cache: bool = Query(False, alias="skipCache")):
            self._require(network, STARDUST)
            request = AliasRequest(network=network, alias_id=alias_id)
            return render(await self.stardust.alias_details(request, skip_cache=skip_cache))

        @self.app.get("/stardust/foundry/{network}/{foundry_id}")
        async def stardust_foundry(
            network: str, foundry_id: str, skip_cache: bool = Query(False, alias="skipCache")
        ):
            self._require(network, STARDUST)
            request = FoundryRequest(network=network, foundry_id=foundry_id)
            return render(await self.stardust.foundry_details(request, skip_cache=skip_cache))

        @self.app.get("/stardust/balance/chronicle/{network}/{address}")
        async def stardust_balance_chronicle(network: str, address: str):
            self._require(network, STARDUST)
            return render(await self.stardust.address_balance_from_chronicle(network, address))

        @self.app.get("/stardust/balance/{network}/{address}")
        async def stardust_balance(network: str, address: str):
            self._require(network, STARDUST)
            return render(await self.stardust.address_balance(network, address))

    def _setup_chrysalis_routes(self):
        """Set up chrysalis routes."""

        @self.app.get("/chrysalis/search/{network}/{query}")
        async def chrysalis_search(network: str, query: str, cursor: Optional[str] = None):
            self._require(network, CHRYSALIS)
            return render(await self.chrysalis.search(network, query, cursor))

        @self.app.get("/chrysalis/milestone/{network}/{milestone_index}")
        async def chrysalis_milestone(network: str, milestone_index: int):
            self._require(network, CHRYSALIS)
            return render(await self.chrysalis.milestone_details(network, milestone_index))

        @self.app.get("/chrysalis/transactionhistory/{network}/{address}")
        async def chrysalis_transaction_history(
            network: str,
            address: str,
            page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
            cursor: Optional[str] = Query(None),
        ):
            self._require(network, CHRYSALIS)
            request = ChrysalisTransactionHistoryRequest(
                network=network, address=address, page_size=page_size, cursor=cursor
            )
            return render(await self.chrysalis.transaction_history(request))


def create_app(**kwargs):
    """Create FastAPI application."""
    service = ExplorerService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = ExplorerService()
    service.run()
