import logging
import uuid

import pytest

from kerald.broker import (
    AcceptingSingleNodeCluster,
    Broker,
    BrokerConfig,
    BrokerError,
    BrokerNodeId,
    ClusterConfig,
    ConfigLoadError,
    DiscoveryComplete,
    DiscoveryInProgress,
    InterBrokerConfig,
    InvalidConfigError,
    RejectingUntilCoordinationReady,
)
from kerald.topic import DataType, Field, Schema, TopicDefinition

CONFIG_LOAD_FAILED = "configuration file could not be loaded"
COORDINATION_QUORUM_NOT_DISCOVERED = "cluster coordination has not discovered a voting quorum"
INVALID_BROKER_CONFIG = "broker configuration values are invalid"
INVALID_BROKER_NODE_UUID = "broker node id must be a UUID"

RESOURCES = {
    "broker-multi-node.toml": "[cluster]\nexpected_brokers = 3\n\n[inter_broker]\nport = 9000\n",
    "broker-single-node.json": '{"cluster": {"expected_brokers": 1}, "inter_broker": {"port": 9000}}',
    "broker-multi-node.yaml": "cluster:\n  expected_brokers: 3\ninter_broker:\n  port: 9002\n",
    "broker-zero-expected-brokers.json": '{"cluster": {"expected_brokers": 0}, "inter_broker": {"port": 9000}}',
    "broker-zero-port.json": '{"cluster": {"expected_brokers": 1}, "inter_broker": {"port": 0}}',
}


@pytest.fixture
def resources(tmp_path):
    for name, text in RESOURCES.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path


def order_schema():
    return Schema([Field("order_id", DataType.UTF8, False)])


def test_broker_node_id_rejects_non_uuid_values():
    with pytest.raises(InvalidConfigError) as info:
        BrokerNodeId.parse("not-a-uuid")
    assert info.value.reason == INVALID_BROKER_NODE_UUID


def test_broker_node_id_generation_returns_uuid():
    generated = BrokerNodeId.generate().as_uuid()
    assert generated.version == 4
    assert generated.int != 0


def test_broker_node_id_parse_round_trip():
    node_id = BrokerNodeId.generate()
    assert BrokerNodeId.parse(str(node_id)) == node_id


def test_single_node_cluster_has_quorum_one():
    config = ClusterConfig.single_node()
    assert config.expected_brokers == 1
    assert config.quorum_size() == 1
    assert config.is_single_node()


def test_multi_node_cluster_calculates_majority_quorum():
    config = ClusterConfig(5)
    assert config.quorum_size() == 3
    assert not config.is_single_node()


@pytest.mark.parametrize("size,quorum", [(1, 1), (3, 2), (5, 3)])
def test_cluster_quorum(size, quorum):
    assert ClusterConfig(size).quorum_size() == quorum


def test_cluster_config_rejects_zero():
    with pytest.raises(InvalidConfigError) as info:
        ClusterConfig(0)
    assert info.value.reason == INVALID_BROKER_CONFIG


def test_inter_broker_config_uses_only_a_port():
    assert InterBrokerConfig(9000).port == 9000


def test_inter_broker_config_rejects_zero_port():
    with pytest.raises(InvalidConfigError):
        InterBrokerConfig(0)


def test_broker_config_loads_from_toml_resource(resources):
    config = BrokerConfig.from_path(resources / "broker-multi-node.toml")
    assert config.cluster.expected_brokers == 3
    assert config.cluster.quorum_size() == 2
    assert config.inter_broker.port == 9000


def test_broker_config_loads_from_json_resource(resources):
    config = BrokerConfig.from_path(resources / "broker-single-node.json")
    assert config.cluster.quorum_size() == 1
    assert config.inter_broker.port == 9000


def test_broker_config_loads_from_yaml_resource(resources):
    config = BrokerConfig.from_path(resources / "broker-multi-node.yaml")
    assert config.cluster.expected_brokers == 3
    assert config.inter_broker.port == 9002


def test_broker_config_reports_missing_file_as_load_failure(resources):
    with pytest.raises(ConfigLoadError) as info:
        BrokerConfig.from_path(resources / "missing.toml")
    assert info.value.reason == CONFIG_LOAD_FAILED
    assert str(info.value) == f"failed to load broker configuration: {CONFIG_LOAD_FAILED}"


def test_broker_config_rejects_zero_expected_brokers(resources):
    with pytest.raises(InvalidConfigError) as info:
        BrokerConfig.from_path(resources / "broker-zero-expected-brokers.json")
    assert info.value.reason == INVALID_BROKER_CONFIG
    assert str(info.value) == f"invalid broker configuration: {INVALID_BROKER_CONFIG}"


def test_broker_config_rejects_zero_inter_broker_port(resources):
    with pytest.raises(InvalidConfigError) as info:
        BrokerConfig.from_path(resources / "broker-zero-port.json")
    assert info.value.reason == INVALID_BROKER_CONFIG


def test_broker_config_rejects_malformed_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigLoadError) as info:
        BrokerConfig.from_path(path)
    assert info.value.reason == CONFIG_LOAD_FAILED


def test_from_mapping_rejects_missing_section():
    with pytest.raises(InvalidConfigError) as info:
        BrokerConfig.from_mapping({"cluster": {"expected_brokers": 1}})
    assert info.value.reason == INVALID_BROKER_CONFIG


def test_errors_share_base_class():
    with pytest.raises(BrokerError):
        BrokerConfig.from_mapping(None)


@pytest.mark.asyncio
async def test_single_node_cluster_starts_with_generated_identity_and_local_admission_enabled():
    broker = await Broker(BrokerConfig.single_node(9000)).start()
    assert broker.local_node_id.as_uuid() != uuid.UUID(int=0)
    assert broker.config.cluster.expected_brokers == 1
    assert broker.config.cluster.quorum_size() == 1
    assert broker.config.inter_broker.port == 9000
    assert broker.discovery_state == DiscoveryComplete(discovered_voters=1)
    assert broker.discovery_state.is_complete()
    assert broker.admission_state == AcceptingSingleNodeCluster()
    assert broker.admission_state.admits_writes()


@pytest.mark.asyncio
async def test_single_node_cluster_preserves_configured_inter_broker_port_at_startup():
    broker = await Broker(BrokerConfig.single_node(9010)).start()
    assert broker.config.cluster.quorum_size() == 1
    assert broker.config.inter_broker.port == 9010
    assert broker.discovery_state == DiscoveryComplete(discovered_voters=1)
    assert broker.admission_state.admits_writes()


@pytest.mark.asyncio
async def test_multi_node_cluster_rejects_writes_until_quorum(caplog):
    caplog.set_level(logging.INFO, logger="kerald")
    broker = await Broker(BrokerConfig(ClusterConfig(3), InterBrokerConfig(9000))).start()
    assert broker.local_node_id.as_uuid() != uuid.UUID(int=0)
    assert broker.config.cluster.expected_brokers == 3
    assert broker.config.cluster.quorum_size() == 2
    assert broker.config.inter_broker.port == 9000
    assert broker.discovery_state == DiscoveryInProgress(discovered_voters=1, required_voters=2)
    assert not broker.discovery_state.is_complete()
    assert broker.admission_state == RejectingUntilCoordinationReady(
        reason=COORDINATION_QUORUM_NOT_DISCOVERED
    )
    assert not broker.admission_state.admits_writes()
    assert any(
        "multi-node cluster is waiting for dynamic voter discovery" in r.getMessage()
        for r in caplog.records
    )


@pytest.mark.asyncio
async def test_partitionless_topic_metadata_is_independent_of_cluster_size():
    single_node = await Broker(BrokerConfig.single_node(9000)).start()
    multi_node = await Broker(BrokerConfig(ClusterConfig(3), InterBrokerConfig(9001))).start()
    topic = TopicDefinition.create("orders.received", order_schema())
    assert topic.name == "orders.received"
    assert topic.schema.field(0).name == "order_id"
    assert single_node.config.cluster.is_single_node()
    assert not multi_node.config.cluster.is_single_node()
    assert single_node.admission_state.admits_writes()
    assert not multi_node.admission_state.admits_writes()


@pytest.mark.asyncio
async def test_broker_keeps_given_node_id():
    node_id = BrokerNodeId.generate()
    broker = await Broker(BrokerConfig.single_node(9000), node_id).start()
    assert broker.local_node_id == node_id