"""
Request and response shapes shared by every protocol generation.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Immutable model using the gateway's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the gateway's camelCase field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ApiResponse(WireModel):
    """Base gateway response.

    The gateway reports domain failures ("not found", "invalid id") by
    resolving successfully with ``error`` set rather than failing the request.
    Unknown fields are kept so nothing the gateway adds is lost on the way
    through the cache.
    """

    error: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class BaseTokenRequest:
    network: str


@dataclass(frozen=True)
class NetworkStatsRequest:
    network: str
    include_history: bool = False


class BaseTokenInfoResponse(ApiResponse):
    """The base token of a network."""

    name: Optional[str] = None
    ticker_symbol: Optional[str] = None
    unit: Optional[str] = None
    subunit: Optional[str] = None
    decimals: Optional[int] = None
    use_metric_prefix: Optional[bool] = None


class NetworkStatsResponse(ApiResponse):
    """Throughput statistics of a network."""

    items_per_second: Optional[float] = None
    confirmed_items_per_second: Optional[float] = None
    confirmation_rate: Optional[float] = None
    latest_milestone_index: Optional[int] = None
    latest_milestone_index_time: Optional[int] = None
    health: Optional[int] = None
    health_reason: Optional[str] = None
    items_per_second_history: Optional[List[float]] = None
