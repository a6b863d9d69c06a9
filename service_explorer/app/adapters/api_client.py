"""
Explorer gateway client.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Type, TypeVar, TYPE_CHECKING
from urllib.parse import quote

import httpx
import pydantic

from shared.errors import ExternalServiceError
from shared.logging import get_logger

from ..models.common import (
    ApiResponse,
    BaseTokenInfoResponse,
    BaseTokenRequest,
    NetworkStatsRequest,
    NetworkStatsResponse,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

ResponseT = TypeVar("ResponseT", bound=ApiResponse)


def path_segment(value: Any) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(str(value), safe="")


class ApiClient:
    """Thin async wrapper around the explorer gateway with basic retry.

    The client does no caching. Soft failures come back as responses carrying
    ``error``; transport failures and unexpected statuses raise
    ``ExternalServiceError``.
    """

    service_name = "explorer_api"

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self.base_url = endpoint.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds
        self.metrics = metrics
        self.logger = get_logger("explorer.api_client")

    async def base_token_info(self, request: BaseTokenRequest) -> BaseTokenInfoResponse:
        """Get the base token info for a network."""
        data = await self.call_api("token", f"token/{path_segment(request.network)}")
        return self.parse_response(BaseTokenInfoResponse, data)

    async def stats(self, request: NetworkStatsRequest) -> NetworkStatsResponse:
        """Get the throughput statistics for a network."""
        data = await self.call_api(
            "stats",
            f"stats/{path_segment(request.network)}",
            params={"includeHistory": "true" if request.include_history else "false"},
        )
        return self.parse_response(NetworkStatsResponse, data)

    async def call_api(
        self,
        endpoint: str,
        path: str,
        method: str = "get",
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Call the gateway and return the decoded JSON object.

        ``endpoint`` is a short name used for logs and metrics.
        """
        url = f"{self.base_url}/{path}"
        query = {key: value for key, value in (params or {}).items() if value is not None}
        last_error: Optional[str] = None

        for attempt in range(1, self.max_retries + 1):
            start = time.perf_counter()
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method.upper(),
                        url,
                        params=query or None,
                        json=payload,
                    )
            except httpx.TransportError as exc:
                last_error = str(exc) or exc.__class__.__name__
                self._record_request(endpoint, "transport_error", start)
                self.logger.warning(
                    "Gateway request failed",
                    endpoint=endpoint,
                    url=url,
                    attempt=attempt,
                    error=last_error,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(self.backoff_seconds * attempt)
                    continue
                break

            self._record_request(endpoint, str(response.status_code), start)

            if response.status_code >= 500:
                last_error = f"Unexpected status {response.status_code}"
                self.logger.warning(
                    "Gateway returned server error",
                    endpoint=endpoint,
                    url=url,
                    attempt=attempt,
                    status_code=response.status_code,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(self.backoff_seconds * attempt)
                    continue
                break

            if response.status_code >= 400:
                self.logger.error(
                    "Gateway request rejected",
                    endpoint=endpoint,
                    url=url,
                    status_code=response.status_code,
                    response=response.text,
                )
                raise ExternalServiceError(
                    service=self.service_name,
                    message=f"Unexpected status {response.status_code}",
                    details={"endpoint": endpoint, "status_code": response.status_code, "body": response.text},
                )

            try:
                data = response.json()
            except ValueError as exc:
                raise ExternalServiceError(
                    service=self.service_name,
                    message="Failed to parse gateway response",
                    details={"endpoint": endpoint},
                ) from exc

            if not isinstance(data, dict):
                raise ExternalServiceError(
                    service=self.service_name,
                    message="Unexpected gateway response (non-object)",
                    details={"endpoint": endpoint},
                )

            self.logger.debug("Gateway response received", endpoint=endpoint, url=url, error=data.get("error"))
            return data

        raise ExternalServiceError(
            service=self.service_name,
            message=last_error or "Request failed",
            details={"endpoint": endpoint, "attempts": self.max_retries},
        )

    def parse_response(self, model: Type[ResponseT], data: Dict[str, Any]) -> ResponseT:
        """Validate a decoded gateway body against its response model."""
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as exc:
            self.logger.error(
                "Gateway response did not match model",
                model=model.__name__,
                errors=exc.error_count(),
            )
            raise ExternalServiceError(
                service=self.service_name,
                message="Unexpected gateway response shape",
                details={
                    "model": model.__name__,
                    "fields": [".".join(str(part) for part in error["loc"]) for error in exc.errors()],
                },
            ) from exc

    def _record_request(self, endpoint: str, status: str, start: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("api_requests_total", endpoint=endpoint, status=status)
        self.metrics.observe_histogram(
            "api_request_duration_seconds",
            time.perf_counter() - start,
            endpoint=endpoint,
        )
