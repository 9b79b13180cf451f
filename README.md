# kerald

A lightweight distributed messaging broker model. A broker generates its
own UUID identity, computes a majority quorum from the configured cluster
size, and admits writes only once that quorum can be proven. Topics are
partitionless streams described by a validated name and a typed schema.

## Installation

```
pip install .
```

## Running the broker

```
kerald
kerald --config broker.toml
kerald --version
```

Without `--config` the broker starts as a single-node cluster with
inter-broker port 9000. With `--config` the file is read as TOML, JSON or
YAML, chosen by its extension (`.toml`, `.json`, `.yaml`, `.yml`):

```toml
[cluster]
expected_brokers = 3

[inter_broker]
port = 9000
```

On startup the command logs the broker's node id, expected broker count,
quorum and inter-broker port. For a multi-node cluster it also logs a
warning that write admission is disabled, with the reason. Logging is at
INFO level by default; set the `KERALD_LOG` environment variable to a
level name such as `DEBUG` or `WARNING` to change it.

If the configuration cannot be loaded or is invalid, the command prints
`Error: ...` to standard error and exits with status 1; otherwise it exits
with status 0.

## Configuration rules

`BrokerConfig.from_path` raises `ConfigLoadError` when the file is
missing, unreadable, unparsable, or has an unsupported extension. It raises
`InvalidConfigError` when the document is not a mapping, lacks
`cluster.expected_brokers` or `inter_broker.port`, or when those values are
not positive integers (`port` must also be at most 65535). Both errors
derive from `BrokerError` and carry the message in `reason`.
`BrokerConfig.from_mapping` applies the same validation to an
already-parsed document.

## Library use

```python
import asyncio
from kerald.broker import Broker, BrokerConfig, ClusterConfig, InterBrokerConfig

running = asyncio.run(Broker(BrokerConfig.single_node(9000)).start())
print(running.local_node_id, running.admission_state.admits_writes())  # ... True

config = BrokerConfig(ClusterConfig(3), InterBrokerConfig(9001))
running = asyncio.run(Broker(config).start())
print(config.cluster.quorum_size())                  # 2
print(running.discovery_state)                       # DiscoveryInProgress(discovered_voters=1, required_voters=2)
print(running.admission_state.admits_writes())       # False
```

A single-node cluster starts with `DiscoveryComplete` and
`AcceptingSingleNodeCluster`. A multi-node cluster starts with only its
local voter discovered (`DiscoveryInProgress`) and
`RejectingUntilCoordinationReady`, whose `reason` is
"cluster coordination has not discovered a voting quorum".

`BrokerNodeId.generate()` creates a random identity;
`BrokerNodeId.parse(text)` accepts a UUID string and raises
`InvalidConfigError` otherwise.

## Topics

```python
from kerald.topic import DataType, Field, Schema, TimeUnit, TopicDefinition, parse_topic_name

parse_topic_name(" orders.received_v1 ")  # "orders.received_v1"
schema = Schema([
    Field("order_id", DataType.UTF8, nullable=False),
    Field("received_at_ns", DataType.timestamp(TimeUnit.NANOSECOND), nullable=False),
])
topic = TopicDefinition.create("orders.received", schema)
topic.schema.field_names()  # ["order_id", "received_at_ns"]
```

Topic names are trimmed, must be non-empty, at most 255 bytes, and use only
ASCII letters, digits, `.`, `_` and `-`; otherwise `InvalidTopicNameError`
(a `TopicError`) is raised. The available data types are
`DataType.BOOLEAN`, `INT32`, `INT64`, `FLOAT64`, `UTF8`, `BINARY` and
`DataType.timestamp(unit, timezone)`.

## What this package does not do

The broker does not open any network sockets, discover peers, store or
deliver messages, or serve clients. `Broker.start` only evaluates the
initial discovery and admission state, and the `kerald` command reports
that state and exits. Topics are metadata only; there is no topic registry
or storage.

## Tests

```
pip install .[test]
pytest
```