"""
Network State Store — owns the evolving state of every requested network.

Created lazily per network id, kept for the life of the process.

Behavioral Contract:
- Time advances only when a snapshot or update is requested. The elapsed
  wall-clock time since the previous recomputation moves the network's
  waveform clock forward.
- Calls on the same network id are serialized by a per-network lock.
  Calls on different ids run independently; the id -> state mapping has
  its own lock used only while inserting a new id.
- lastUpdated never moves backwards.
"""

import logging
import random
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from netsim_kernel.diff.engine import DiffEngine
from netsim_kernel.history.store import HistoryStore
from netsim_kernel.metrics.alerts import classify_allocation
from netsim_kernel.metrics.waveform import anchored_value, create_pattern
from netsim_kernel.models.diff import NetworkDiff
from netsim_kernel.models.network import (
    CurrentMetrics,
    MetricData,
    MetricSample,
    NetworkData,
    NodeType,
    format_timestamp,
)
from netsim_kernel.models.simulator import SimulatorConfig
from netsim_kernel.models.waveform import WaveformPattern
from netsim_kernel.topology.factory import TopologyFactory

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NetworkState:
    """Mutable state of one network. Guarded by its own lock."""

    def __init__(
        self,
        snapshot: NetworkData,
        last_update: datetime,
        patterns: Dict[str, WaveformPattern],
    ):
        self.snapshot = snapshot
        self.last_update = last_update
        self.patterns = patterns
        self.clock_seconds = 0.0
        self.lock = threading.Lock()


class NetworkStateStore:
    """Keyed ownership of network states, orchestrating recomputation."""

    def __init__(
        self,
        topology: Optional[TopologyFactory] = None,
        history: Optional[HistoryStore] = None,
        config: Optional[SimulatorConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or SimulatorConfig()
        self.topology = topology or TopologyFactory(
            data_dir=self.config.topology_dir,
            generate_missing=self.config.generate_missing_networks,
        )
        self.history = history or HistoryStore(
            db_path=self.config.history_db_path,
            capacity=self.config.history_capacity,
            timeout_seconds=self.config.history_timeout_seconds,
        )
        self.diff_engine = DiffEngine(include_history=self.config.diff_include_history)
        self._rng = rng or random.Random()

        self._states: Dict[str, NetworkState] = {}
        self._parents: Dict[str, str] = {}     # child network id -> parent id
        self._lock = threading.Lock()

    def network_ids(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def get_or_create(
        self, network_id: str, current_time: Optional[datetime] = None
    ) -> NetworkState:
        """
        Return the state for a network, building it on first access.
        Raises NetworkNotFoundError when the topology source has nothing.
        """
        state = self._states.get(network_id)
        if state is not None:
            return state

        with self._lock:
            state = self._states.get(network_id)
            if state is None:
                state = self._create(network_id, current_time or _utcnow())
                self._states[network_id] = state
            return state

    def _create(self, network_id: str, now: datetime) -> NetworkState:
        network = self.topology.build(
            network_id,
            parent_id=self._parents.get(network_id),
            current_time=now,
        )

        patterns: Dict[str, WaveformPattern] = {}
        resources = [(node.id, node) for node in network.nodes]
        resources += [(link.resource_id, link) for link in network.links]
        for resource_id, resource in resources:
            key = self._history_key(network_id, resource_id)
            seed = self._import_seed_history(key, resource.metrics.history)
            if seed is None:
                seed = resource.metrics.current.allocation
            patterns[resource_id] = create_pattern(seed, self._rng)
            resource.metrics = self._seed_metrics(resource.metrics, seed, key)

        for node in network.nodes:
            if node.type == NodeType.CLUSTER and node.child_network:
                self._parents.setdefault(node.child_network, network_id)

        logger.info(
            "Created state for network %s (%d nodes, %d links)",
            network_id, len(network.nodes), len(network.links),
        )
        return NetworkState(snapshot=network, last_update=now, patterns=patterns)

    def _import_seed_history(self, key: str, samples: List[MetricSample]) -> Optional[float]:
        """
        Latest known value for a resource. A seed topology's own history is
        copied into the history store when nothing is retained for it yet.
        """
        if self.history.most_recent_value(key) is None:
            for sample in samples:
                self.history.append(key, sample)
        return self.history.most_recent_value(key)

    def _seed_metrics(self, metrics: MetricData, seed: float, key: str) -> MetricData:
        timestamp = metrics.current.timestamp
        current = metrics.current.model_copy(update={"allocation": seed})
        return MetricData(
            current=current,
            history=self.history.history(key),
            alerts=self._classify(seed, timestamp),
        )

    def snapshot(
        self, network_id: str, current_time: Optional[datetime] = None
    ) -> NetworkData:
        """Recompute the network and return the full new snapshot."""
        state = self.get_or_create(network_id, current_time)
        with state.lock:
            _, new = self._advance(network_id, state, current_time or _utcnow())
        return new

    def update(
        self, network_id: str, current_time: Optional[datetime] = None
    ) -> NetworkDiff:
        """Recompute the network and return only what changed."""
        state = self.get_or_create(network_id, current_time)
        with state.lock:
            old, new = self._advance(network_id, state, current_time or _utcnow())
            return self.diff_engine.diff(old, new)

    def _advance(
        self, network_id: str, state: NetworkState, now: datetime
    ) -> Tuple[NetworkData, NetworkData]:
        """Move the waveform clock forward and rebuild every resource. Caller holds state.lock."""
        old = state.snapshot
        elapsed = (now - state.last_update).total_seconds()
        if elapsed > 0:
            state.clock_seconds += elapsed
            state.last_update = now
        timestamp = format_timestamp(state.last_update)

        new = old.model_copy(deep=True)
        new.metadata.last_updated = max(old.metadata.last_updated, timestamp)

        resources = [(node.id, node) for node in new.nodes]
        resources += [(link.resource_id, link) for link in new.links]
        for resource_id, resource in resources:
            value = anchored_value(state.patterns[resource_id], state.clock_seconds)
            resource.metrics = self._recompute(
                self._history_key(network_id, resource_id),
                resource.metrics.current,
                value,
                timestamp,
            )

        state.snapshot = new
        return old, new

    def _recompute(
        self, key: str, previous: CurrentMetrics, value: float, timestamp: str
    ) -> MetricData:
        self.history.append(key, MetricSample(timestamp=timestamp, value=value))
        return MetricData(
            current=previous.model_copy(update={"allocation": value, "timestamp": timestamp}),
            history=self.history.history(key),
            alerts=self._classify(value, timestamp),
        )

    def _classify(self, value: float, timestamp: str):
        return classify_allocation(
            value,
            timestamp,
            warning_threshold=self.config.warning_threshold,
            critical_threshold=self.config.critical_threshold,
        )

    @staticmethod
    def _history_key(network_id: str, resource_id: str) -> str:
        return f"{network_id}/{resource_id}"
