"""
Chrysalis request and response shapes.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .common import ApiResponse


@dataclass(frozen=True)
class ChrysalisSearchRequest:
    network: str
    query: str
    cursor: Optional[str] = None


@dataclass(frozen=True)
class ChrysalisMilestoneRequest:
    network: str
    milestone_index: int


@dataclass(frozen=True)
class ChrysalisTransactionHistoryRequest:
    network: str
    address: str
    page_size: Optional[int] = None
    cursor: Optional[str] = None


class ChrysalisSearchResponse(ApiResponse):
    address: Optional[Dict[str, Any]] = None
    address_output_ids: Optional[List[str]] = None
    historic_address_output_ids: Optional[List[str]] = None
    # Either the found ledger message or the gateway status string
    message: Optional[Union[Dict[str, Any], str]] = None
    included_message: Optional[Dict[str, Any]] = None
    indexed_message_ids: Optional[List[str]] = None
    indexed_message_type: Optional[str] = None
    milestone: Optional[Dict[str, Any]] = None
    output: Optional[Dict[str, Any]] = None
    did: Optional[str] = None


class ChrysalisMilestoneResponse(ApiResponse):
    milestone: Optional[Dict[str, Any]] = None


class ChrysalisTransactionHistoryResponse(ApiResponse):
    history: Optional[List[Dict[str, Any]]] = None
    state: Optional[Dict[str, Any]] = None
