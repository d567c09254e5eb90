"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from netsim_kernel.models import (
    CurrentMetrics,
    Link,
    MetricData,
    NetworkData,
    NetworkMetadata,
    Node,
    NodeType,
    SimulatorConfig,
)

TS = "2026-01-01T00:00:00Z"


def _metrics(value: float = 50.0) -> MetricData:
    return MetricData(current=CurrentMetrics(allocation=value, timestamp=TS))


def _node(node_id: str) -> Node:
    return Node(id=node_id, x=0.0, y=0.0, metrics=_metrics())


def _network(links) -> NetworkData:
    return NetworkData(
        metadata=NetworkMetadata(id="n", last_updated=TS),
        nodes=[_node("a"), _node("b"), _node("c")],
        links=[Link(source=s, target=t, metrics=_metrics()) for s, t in links],
    )


class TestNetworkData:
    def test_valid_network(self):
        network = _network([("a", "b"), ("b", "c")])
        assert [l.resource_id for l in network.links] == ["a->b", "b->c"]
        assert network.nodes[0].type == NodeType.LEAF

    def test_rejects_unknown_endpoint(self):
        with pytest.raises(ValidationError):
            _network([("a", "z")])

    def test_rejects_self_loop(self):
        with pytest.raises(ValidationError):
            _network([("a", "a")])

    def test_rejects_reversed_duplicate(self):
        with pytest.raises(ValidationError):
            _network([("a", "b"), ("b", "a")])

    def test_rejects_duplicate_node_ids(self):
        with pytest.raises(ValidationError):
            NetworkData(
                metadata=NetworkMetadata(id="n", last_updated=TS),
                nodes=[_node("a"), _node("a")],
            )

    def test_allocation_bounds(self):
        with pytest.raises(ValidationError):
            CurrentMetrics(allocation=100.5, timestamp=TS)
        with pytest.raises(ValidationError):
            CurrentMetrics(allocation=-1, timestamp=TS)

    def test_payload_uses_client_names(self):
        network = NetworkData(
            metadata=NetworkMetadata(id="n", parent_network="root", last_updated=TS),
            nodes=[Node(
                id="a", x=1.0, y=2.0, type=NodeType.CLUSTER,
                child_network="n_a", metrics=_metrics(),
            )],
        )
        payload = network.to_payload()
        assert payload["metadata"]["parentNetwork"] == "root"
        assert payload["metadata"]["lastUpdated"] == TS
        assert payload["metadata"]["updateInterval"] == 5000
        assert payload["nodes"][0]["childNetwork"] == "n_a"
        assert payload["nodes"][0]["type"] == "cluster"

    def test_round_trip_from_client_json(self):
        network = _network([("a", "b")])
        again = NetworkData.model_validate(network.to_payload())
        assert again == network

    def test_extra_metrics_preserved(self):
        current = CurrentMetrics.model_validate(
            {"allocation": 10.0, "timestamp": TS, "latency": 3.5}
        )
        assert current.model_dump()["latency"] == 3.5


class TestSimulatorConfig:
    def test_defaults(self):
        config = SimulatorConfig()
        assert config.history_capacity == 50
        assert config.warning_threshold == 75.0
        assert config.critical_threshold == 90.0
        assert config.history_db_path is None
        assert config.generate_missing_networks is True

    def test_thresholds_ordered(self):
        with pytest.raises(ValidationError):
            SimulatorConfig(warning_threshold=95.0, critical_threshold=90.0)

    def test_from_env(self):
        config = SimulatorConfig.from_env({
            "NETSIM_HISTORY_DB": "/tmp/history.db",
            "NETSIM_GENERATE_MISSING": "false",
            "NETSIM_HISTORY_CAPACITY": "20",
            "NETSIM_WARNING_THRESHOLD": "70",
            "UNRELATED": "x",
        })
        assert config.history_db_path == "/tmp/history.db"
        assert config.generate_missing_networks is False
        assert config.history_capacity == 20
        assert config.warning_threshold == 70.0

    def test_from_env_invalid(self):
        with pytest.raises(ValidationError):
            SimulatorConfig.from_env({"NETSIM_HISTORY_CAPACITY": "zero"})
