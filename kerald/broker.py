"""Broker configuration, identity and startup state."""

from __future__ import annotations

import json
import logging
import sys
import tomllib
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_LOAD_FAILED = "configuration file could not be loaded"
COORDINATION_QUORUM_NOT_DISCOVERED = "cluster coordination has not discovered a voting quorum"
INVALID_BROKER_CONFIG = "broker configuration values are invalid"
INVALID_BROKER_NODE_UUID = "broker node id must be a UUID"

_MAX_PORT = 65535


class BrokerError(Exception):
    """Base class for broker startup and configuration errors."""

    prefix = "broker error"

    def __init__(self, reason: str) -> None:
        super().__init__(f"{self.prefix}: {reason}")
        self.reason = reason


class ConfigLoadError(BrokerError):
    """The configuration file could not be read or parsed."""

    prefix = "failed to load broker configuration"


class InvalidConfigError(BrokerError, ValueError):
    """Configuration values are present but invalid."""

    prefix = "invalid broker configuration"


def _non_zero(value: Any, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= maximum:
        raise InvalidConfigError(INVALID_BROKER_CONFIG)
    return value


@dataclass(frozen=True)
class BrokerNodeId:
    """Durable identity for a broker process, generated rather than configured."""

    value: uuid.UUID

    @classmethod
    def generate(cls) -> BrokerNodeId:
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls, value: str) -> BrokerNodeId:
        try:
            return cls(uuid.UUID(value))
        except (ValueError, TypeError, AttributeError) as exc:
            raise InvalidConfigError(INVALID_BROKER_NODE_UUID) from exc

    def as_uuid(self) -> uuid.UUID:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ClusterConfig:
    """Operator-provided cluster size used to calculate quorum."""

    expected_brokers: int

    def __post_init__(self) -> None:
        _non_zero(self.expected_brokers, sys.maxsize)

    @classmethod
    def single_node(cls) -> ClusterConfig:
        return cls(1)

    def quorum_size(self) -> int:
        """Majority of the expected brokers."""
        return self.expected_brokers // 2 + 1

    def is_single_node(self) -> bool:
        return self.expected_brokers == 1


@dataclass(frozen=True)
class InterBrokerConfig:
    """Inter-broker settings: only the local port; peers are discovered."""

    port: int

    def __post_init__(self) -> None:
        _non_zero(self.port, _MAX_PORT)


def _load_toml(text: str) -> Any:
    return tomllib.loads(text)


def _load_json(text: str) -> Any:
    return json.loads(text)


def _load_yaml(text: str) -> Any:
    return yaml.safe_load(text)


_LOADERS: dict[str, Callable[[str], Any]] = {
    ".toml": _load_toml,
    ".json": _load_json,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
}


@dataclass(frozen=True)
class BrokerConfig:
    """Static broker startup configuration."""

    cluster: ClusterConfig
    inter_broker: InterBrokerConfig

    @classmethod
    def single_node(cls, port: int) -> BrokerConfig:
        return cls(ClusterConfig.single_node(), InterBrokerConfig(port))

    @classmethod
    def from_mapping(cls, data: Any) -> BrokerConfig:
        """Build a configuration from a parsed document."""
        if not isinstance(data, Mapping):
            raise InvalidConfigError(INVALID_BROKER_CONFIG)
        try:
            cluster = data["cluster"]
            inter_broker = data["inter_broker"]
            return cls(
                ClusterConfig(cluster["expected_brokers"]),
                InterBrokerConfig(inter_broker["port"]),
            )
        except (KeyError, TypeError) as exc:
            raise InvalidConfigError(INVALID_BROKER_CONFIG) from exc

    @classmethod
    def from_path(cls, path: str | PathLike[str]) -> BrokerConfig:
        """Load a TOML, JSON or YAML configuration file, chosen by extension."""
        path = Path(path)
        loader = _LOADERS.get(path.suffix.lower())
        if loader is None:
            raise ConfigLoadError(CONFIG_LOAD_FAILED)
        try:
            data = loader(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
            raise ConfigLoadError(CONFIG_LOAD_FAILED) from exc
        return cls.from_mapping(data)


@dataclass(frozen=True)
class DiscoveryState:
    """Voter discovery progress for a running broker."""

    discovered_voters: int

    def is_complete(self) -> bool:
        return False


@dataclass(frozen=True)
class DiscoveryComplete(DiscoveryState):
    """Every voter needed for quorum has been discovered."""

    def is_complete(self) -> bool:
        return True


@dataclass(frozen=True)
class DiscoveryInProgress(DiscoveryState):
    """Discovery has not yet reached the required number of voters."""

    required_voters: int


@dataclass(frozen=True)
class AdmissionState:
    """Write admission state exposed by broker startup."""

    def admits_writes(self) -> bool:
        return False


@dataclass(frozen=True)
class AcceptingSingleNodeCluster(AdmissionState):
    """Writes are admitted because the cluster is a single node."""

    def admits_writes(self) -> bool:
        return True


@dataclass(frozen=True)
class RejectingUntilCoordinationReady(AdmissionState):
    """Writes are rejected until coordination reaches quorum."""

    reason: str


@dataclass(frozen=True)
class RunningBroker:
    """Broker after startup validation and initial discovery evaluation."""

    local_node_id: BrokerNodeId
    config: BrokerConfig
    discovery_state: DiscoveryState
    admission_state: AdmissionState


@dataclass(frozen=True)
class Broker:
    """Broker process before startup."""

    config: BrokerConfig
    local_node_id: BrokerNodeId = field(default_factory=BrokerNodeId.generate)

    async def start(self) -> RunningBroker:
        """Evaluate initial discovery and admission, returning the running broker."""
        cluster = self.config.cluster
        expected = cluster.expected_brokers
        quorum = cluster.quorum_size()
        # Until real discovery exists, only the local voter can be proven.
        discovered = 1

        discovery: DiscoveryState
        admission: AdmissionState
        if cluster.is_single_node():
            logger.info(
                "single-node cluster quorum is immediately available "
                "local_node_id=%s expected_brokers=%d quorum=%d",
                self.local_node_id,
                expected,
                quorum,
            )
            discovery = DiscoveryComplete(discovered_voters=discovered)
            admission = AcceptingSingleNodeCluster()
        else:
            logger.warning(
                "multi-node cluster is waiting for dynamic voter discovery "
                "local_node_id=%s expected_brokers=%d discovered_voters=%d quorum=%d",
                self.local_node_id,
                expected,
                discovered,
                quorum,
            )
            discovery = DiscoveryInProgress(discovered_voters=discovered, required_voters=quorum)
            admission = RejectingUntilCoordinationReady(reason=COORDINATION_QUORUM_NOT_DISCOVERED)

        return RunningBroker(
            local_node_id=self.local_node_id,
            config=self.config,
            discovery_state=discovery,
            admission_state=admission,
        )