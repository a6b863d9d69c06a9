"""
In-memory tangle cache store partitioned by network.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class CacheEntry:
    """A cached gateway payload and the time it was written."""

    data: Any
    cached_at: float


def query_key(kind: str, *fields: Any) -> str:
    """Build the cache key of one logical query.

    Fields are percent-encoded before joining so that no two distinct field
    tuples can produce the same key. ``None`` encodes as an empty field.
    """
    parts = [kind]
    for field in fields:
        parts.append("" if field is None else quote(str(field), safe=""))
    return ":".join(parts)


class CacheStore:
    """Nested mapping of network -> query key -> ``CacheEntry``.

    Partitions are created up front for every known network. Using a network
    that was not known at construction raises ``KeyError``.
    """

    def __init__(
        self,
        networks: Iterable[str],
        *,
        name: str = "tangle",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.name = name
        self._clock = clock
        self._partitions: Dict[str, Dict[str, CacheEntry]] = {network: {} for network in networks}

    def get(self, network: str, key: str) -> Optional[CacheEntry]:
        return self._partitions[network].get(key)

    def set(self, network: str, key: str, data: Any) -> CacheEntry:
        entry = CacheEntry(data=data, cached_at=self._clock())
        self._partitions[network][key] = entry
        return entry

    def delete(self, network: str, key: str) -> bool:
        return self._partitions[network].pop(key, None) is not None

    def networks(self) -> List[str]:
        return list(self._partitions)

    def items(self, network: str) -> List[Tuple[str, CacheEntry]]:
        """Snapshot of a partition, safe to iterate while deleting."""
        return list(self._partitions[network].items())

    def __contains__(self, item: Tuple[str, str]) -> bool:
        network, key = item
        return key in self._partitions.get(network, {})

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._partitions.values())
