"""
Gateway request and response models.

Requests are frozen dataclasses carrying the identifying fields of a query
(always including ``network``). Responses are frozen pydantic models so a
payload held by the tangle cache can never be mutated after it is written.
"""

from .common import (
    ApiResponse,
    BaseTokenInfoResponse,
    BaseTokenRequest,
    NetworkStatsRequest,
    NetworkStatsResponse,
    WireModel,
)

__all__ = [
    "ApiResponse",
    "BaseTokenInfoResponse",
    "BaseTokenRequest",
    "NetworkStatsRequest",
    "NetworkStatsResponse",
    "WireModel",
]
