"""
Stardust request and response shapes.

Ledger objects (blocks, outputs, milestones) are passed through as plain
dictionaries exactly as the gateway returns them; only the envelope fields
the explorer reasons about are modelled.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .common import ApiResponse, WireModel


class Bech32AddressDetails(WireModel):
    """A bech32 address and its decoded parts."""

    bech32: str
    hex: Optional[str] = None
    type: Optional[int] = None
    type_label: Optional[str] = None


# Requests

@dataclass(frozen=True)
class SearchRequest:
    network: str
    query: str
    cursor: Optional[str] = None


@dataclass(frozen=True)
class BlockDetailsRequest:
    network: str
    block_id: str


@dataclass(frozen=True)
class TransactionDetailsRequest:
    network: str
    transaction_id: str


@dataclass(frozen=True)
class OutputDetailsRequest:
    network: str
    output_id: str


@dataclass(frozen=True)
class AssociatedOutputsRequest:
    network: str
    address_details: Bech32AddressDetails


@dataclass(frozen=True)
class MilestoneDetailsRequest:
    network: str
    milestone_index: int


@dataclass(frozen=True)
class TransactionHistoryRequest:
    """One page of an address's transaction history.

    Every cursor value is its own page and is cached independently.
    """

    network: str
    address: str
    page_size: Optional[int] = None
    sort: Optional[str] = None
    start_milestone_index: Optional[int] = None
    cursor: Optional[str] = None


@dataclass(frozen=True)
class NftOutputsRequest:
    network: str
    address: str


@dataclass(frozen=True)
class FoundriesRequest:
    network: str
    alias_address: str


@dataclass(frozen=True)
class AliasRequest:
    network: str
    alias_id: str


@dataclass(frozen=True)
class FoundryRequest:
    network: str
    foundry_id: str


@dataclass(frozen=True)
class NftDetailsRequest:
    network: str
    nft_id: str


@dataclass(frozen=True)
class AddressBalanceRequest:
    network: str
    address: str


class AssociatedOutputsBody(WireModel):
    """Body of an associated outputs lookup."""

    address_details: Bech32AddressDetails


# Responses

class SearchResponse(ApiResponse):
    """Result of a free-text search; at most a few fields are ever set."""

    block: Optional[Dict[str, Any]] = None
    transaction_block: Optional[Dict[str, Any]] = None
    address_details: Optional[Bech32AddressDetails] = None
    output: Optional[Dict[str, Any]] = None
    tagged_outputs: Optional[Dict[str, Any]] = None
    address_output_ids: Optional[List[str]] = None
    alias_id: Optional[str] = None
    foundry_id: Optional[str] = None
    nft_id: Optional[str] = None
    milestone: Optional[Dict[str, Any]] = None
    did: Optional[str] = None


class BlockDetailsResponse(ApiResponse):
    block: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class TransactionDetailsResponse(ApiResponse):
    block: Optional[Dict[str, Any]] = None


class OutputDetailsResponse(ApiResponse):
    output: Optional[Dict[str, Any]] = None


class AssociatedOutputsResponse(ApiResponse):
    outputs: Optional[List[Dict[str, Any]]] = None


class MilestoneDetailsResponse(ApiResponse):
    block_id: Optional[str] = None
    milestone_id: Optional[str] = None
    milestone: Optional[Dict[str, Any]] = None


class MilestoneStatsResponse(ApiResponse):
    milestone_index: Optional[int] = None
    blocks_count: Optional[int] = None
    per_payload_type: Optional[Dict[str, int]] = None
    per_inclusion_state: Optional[Dict[str, int]] = None


class TransactionHistoryResponse(ApiResponse):
    address: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    cursor: Optional[str] = None


class NftOutputsResponse(ApiResponse):
    outputs: Optional[Dict[str, Any]] = None


class FoundriesResponse(ApiResponse):
    foundry_outputs_response: Optional[Dict[str, Any]] = None


class AliasResponse(ApiResponse):
    alias_details: Optional[Dict[str, Any]] = None


class FoundryResponse(ApiResponse):
    foundry_details: Optional[Dict[str, Any]] = None


class NftDetailsResponse(ApiResponse):
    nft_details: Optional[Dict[str, Any]] = None


class NftRegistryDetailsResponse(ApiResponse):
    """Registry metadata for an NFT (served by a mock registry)."""

    name: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    issuer_name: Optional[str] = None
    collection_id: Optional[str] = None
    collection_name: Optional[str] = None


class AddressBalanceResponse(ApiResponse):
    total_balance: Optional[int] = None
    available_balance: Optional[int] = None
    sig_locked_balance: Optional[int] = None
    ledger_index: Optional[int] = None
