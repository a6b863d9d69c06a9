"""
Read-through access to a ``CacheStore``.

A ``QueryPolicy`` tells the cache how to key a request and whether a gateway
response is worth keeping. Only meaningful responses are written; empty and
error responses are never cached, so every miss stays a prospective write.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, TYPE_CHECKING

from shared.logging import get_logger

from ..models.common import ApiResponse
from .store import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT", bound=ApiResponse)


def has_any(response: ApiResponse, *fields: str) -> bool:
    """True when ``response`` carries no error and at least one of ``fields``."""
    if response.error:
        return False
    return any(getattr(response, field, None) is not None for field in fields)


def meaningful_when_any(*fields: str) -> Callable[[ApiResponse], bool]:
    return lambda response: has_any(response, *fields)


@dataclass(frozen=True)
class QueryPolicy(Generic[RequestT, ResponseT]):
    """Key construction and caching predicate for one query type."""

    name: str
    compute_key: Callable[[RequestT], str]
    is_meaningful: Callable[[ResponseT], bool]


class ReadThroughCache:
    """Check the store, fall back to the loader, keep meaningful results.

    Concurrent callers that miss the same key each fetch; the last meaningful
    result to complete wins. There is no in-flight de-duplication and no
    cancellation: a started fetch always completes and is written if
    meaningful.
    """

    def __init__(self, store: CacheStore, *, metrics: Optional["MetricsCollector"] = None) -> None:
        self.store = store
        self.metrics = metrics
        self.logger = get_logger(f"explorer.cache.{store.name}")

    async def fetch(
        self,
        request: Any,
        policy: QueryPolicy[Any, ResponseT],
        loader: Callable[[Any], Awaitable[ResponseT]],
        *,
        skip_cache: bool = False,
    ) -> Optional[ResponseT]:
        network = request.network
        key = policy.compute_key(request)

        cached = self.store.get(network, key)
        if cached is not None and not skip_cache:
            self._count("cache_lookups_total", policy, result="hit")
            return cached.data

        self._count("cache_lookups_total", policy, result="bypass" if skip_cache else "miss")
        response = await loader(request)

        if policy.is_meaningful(response):
            self.store.set(network, key, response)
            self._count("cache_writes_total", policy)
            if self.metrics:
                self.metrics.set_gauge("cache_entries", len(self.store), cache=self.store.name)
            self.logger.debug("Cached gateway response", query=policy.name, network=network, key=key)
            return self.store.get(network, key).data

        if response.error:
            self._count("cache_skipped_writes_total", policy, reason="error")
            self.logger.info(
                "Gateway returned an error; not caching",
                query=policy.name,
                network=network,
                key=key,
                error=response.error,
            )
            return response

        self._count("cache_skipped_writes_total", policy, reason="empty")
        self.logger.debug("Gateway response was empty; not caching", query=policy.name, network=network, key=key)
        # Prior entry, or one written by a concurrent fetch of the same key.
        current = self.store.get(network, key)
        return current.data if current is not None else None

    def _count(self, metric: str, policy: QueryPolicy, **labels: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric, cache=self.store.name, query=policy.name, **labels)
