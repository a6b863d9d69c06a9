"""
Network registry for the explorer.

The registry is the closed set of ledger networks the explorer knows about.
Cache partitions are created from it at service construction, so every
network id reaching a cache has already been validated here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.errors import NotFoundError, ValidationError
from shared.logging import get_logger

LEGACY = "legacy"
CHRYSALIS = "chrysalis"
STARDUST = "stardust"

PROTOCOL_VERSIONS = (LEGACY, CHRYSALIS, STARDUST)


class NetworkConfig(BaseModel):
    """Configuration of a single ledger network."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    network: str
    protocol_version: str
    label: str = ""
    description: Optional[str] = None
    bech_hrp: Optional[str] = None
    is_enabled: bool = True
    is_hidden: bool = False
    milestone_interval: Optional[float] = None
    identity_resolver_enabled: bool = False


DEFAULT_NETWORKS = [
    NetworkConfig(network="mainnet", protocol_version=STARDUST, label="Mainnet", bech_hrp="iota"),
    NetworkConfig(network="shimmer", protocol_version=STARDUST, label="Shimmer", bech_hrp="smr"),
    NetworkConfig(network="testnet", protocol_version=STARDUST, label="Testnet", bech_hrp="rms"),
    NetworkConfig(network="chrysalis-mainnet", protocol_version=CHRYSALIS, label="Chrysalis", bech_hrp="iota"),
    NetworkConfig(network="legacy-mainnet", protocol_version=LEGACY, label="Legacy", is_hidden=True),
]


class NetworkRegistry:
    """Read-only view over the configured networks."""

    def __init__(self, networks: Iterable[NetworkConfig]):
        self._networks: Dict[str, NetworkConfig] = {}
        for config in networks:
            if config.protocol_version not in PROTOCOL_VERSIONS:
                raise ValidationError(
                    f"Unknown protocol version '{config.protocol_version}'",
                    details={"network": config.network},
                )
            if config.network in self._networks:
                raise ValidationError(
                    f"Duplicate network '{config.network}'",
                    details={"network": config.network},
                )
            self._networks[config.network] = config

    def networks(self) -> List[NetworkConfig]:
        return list(self._networks.values())

    def network_ids(self) -> List[str]:
        return list(self._networks)

    def get(self, network: str) -> NetworkConfig:
        config = self._networks.get(network)
        if config is None:
            allowed = ", ".join(sorted(self._networks))
            raise NotFoundError(
                f"Unknown network '{network}'. Supported: {allowed}",
                details={"network": network},
            )
        return config

    def for_protocol(self, protocol_version: str) -> List[NetworkConfig]:
        return [config for config in self._networks.values() if config.protocol_version == protocol_version]

    def __contains__(self, network: object) -> bool:
        return network in self._networks

    def __len__(self) -> int:
        return len(self._networks)


def load_network_registry(path: Optional[Union[str, Path]] = None) -> NetworkRegistry:
    """Load the registry from a JSON list of network configurations.

    Falls back to the built-in networks when no path is given.
    """
    logger = get_logger("explorer.networks")
    if path is None:
        logger.info("Using built-in network list", networks=len(DEFAULT_NETWORKS))
        return NetworkRegistry(DEFAULT_NETWORKS)

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValidationError("Network file must contain a JSON list", details={"path": str(path)})

    registry = NetworkRegistry(NetworkConfig.model_validate(item) for item in payload)
    logger.info("Loaded network list", path=str(path), networks=len(registry))
    return registry
