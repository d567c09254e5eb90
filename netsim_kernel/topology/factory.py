"""
Topology Factory — initial graph for a network id.

Load mode reads a serialized NetworkData from <data_dir>/networks/<id>.json.
Generate mode builds a small random network laid out on a circle.
"""

import logging
import math
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from netsim_kernel.models.network import (
    CurrentMetrics,
    Link,
    MetricData,
    NetworkData,
    NetworkMetadata,
    Node,
    NodeType,
    format_timestamp,
)

logger = logging.getLogger(__name__)

LAYOUT_RADIUS = 200.0
LAYOUT_CENTER = (400.0, 300.0)
NODE_COUNT_CHOICES = (3, 4)
CLUSTER_PROBABILITY = 0.3
LINK_PROBABILITY = 0.7
INITIAL_ALLOCATION_RANGE = (30.0, 70.0)
DEFAULT_UPDATE_INTERVAL_MS = 5000
DEFAULT_RETENTION_SECONDS = 3600


class NetworkNotFoundError(Exception):
    """Raised when no topology exists for a network id and none may be generated."""

    def __init__(self, network_id: str):
        super().__init__(f"Network not found: {network_id}")
        self.network_id = network_id


def _initial_metrics(value: float, timestamp: str) -> MetricData:
    return MetricData(
        current=CurrentMetrics(allocation=value, timestamp=timestamp),
        history=[],
        alerts=[],
    )


class TopologyFactory:
    """Builds or loads the starting graph of a network."""

    def __init__(
        self,
        data_dir: Optional[str] = None,
        generate_missing: bool = True,
        rng: Optional[random.Random] = None,
    ):
        self.data_dir = Path(data_dir) if data_dir else None
        self.generate_missing = generate_missing
        self._rng = rng or random.Random()

    def build(
        self,
        network_id: str,
        parent_id: Optional[str] = None,
        current_time: Optional[datetime] = None,
    ) -> NetworkData:
        """Load the network if a seed exists, else generate it when allowed."""
        if self.data_dir is not None:
            try:
                return self.load(network_id)
            except NetworkNotFoundError:
                if not self.generate_missing:
                    raise
                logger.debug("No seed for network %s, generating one", network_id)

        if not self.generate_missing:
            raise NetworkNotFoundError(network_id)
        return self.generate(network_id, parent_id, current_time)

    def seed_path(self, network_id: str) -> Optional[Path]:
        if self.data_dir is None:
            return None
        return self.data_dir / "networks" / f"{network_id}.json"

    def load(self, network_id: str) -> NetworkData:
        """Read a seed topology. Unreadable or invalid seeds count as missing."""
        path = self.seed_path(network_id)
        if path is None or not path.is_file():
            logger.warning("Network data file not found: %s", path)
            raise NetworkNotFoundError(network_id)

        try:
            network = NetworkData.model_validate_json(path.read_text())
        except (OSError, ValidationError) as e:
            logger.error("Error reading network data for %s: %s", network_id, e)
            raise NetworkNotFoundError(network_id) from e

        if network.metadata.id != network_id:
            logger.warning(
                "Seed file %s declares id %s, using %s",
                path, network.metadata.id, network_id,
            )
            network.metadata.id = network_id
        return network

    def generate(
        self,
        network_id: str,
        parent_id: Optional[str] = None,
        current_time: Optional[datetime] = None,
    ) -> NetworkData:
        """Generate 3-4 nodes on a circle with a random subset of links."""
        rng = self._rng
        timestamp = format_timestamp(current_time or datetime.now(timezone.utc))

        metadata = NetworkMetadata(
            id=network_id,
            parent_network=parent_id,
            description=f"Network {network_id}",
            last_updated=timestamp,
            update_interval=DEFAULT_UPDATE_INTERVAL_MS,
            retention_period=DEFAULT_RETENTION_SECONDS,
        )

        num_nodes = rng.choice(NODE_COUNT_CHOICES)
        nodes: List[Node] = []
        for i in range(1, num_nodes + 1):
            angle = 2 * math.pi * (i - 1) / num_nodes
            node_id = f"{network_id}_{i}"
            is_cluster = rng.random() < CLUSTER_PROBABILITY
            nodes.append(Node(
                id=node_id,
                x=LAYOUT_RADIUS * math.cos(angle) + LAYOUT_CENTER[0],
                y=LAYOUT_RADIUS * math.sin(angle) + LAYOUT_CENTER[1],
                type=NodeType.CLUSTER if is_cluster else NodeType.LEAF,
                child_network=node_id if is_cluster else None,
                metrics=_initial_metrics(self._initial_allocation(), timestamp),
            ))

        links: List[Link] = []
        for i in range(num_nodes):
            for j in range(i + 1, num_nodes):
                if rng.random() < LINK_PROBABILITY:
                    links.append(Link(
                        source=nodes[i].id,
                        target=nodes[j].id,
                        metrics=_initial_metrics(self._initial_allocation(), timestamp),
                    ))

        logger.debug(
            "Generated network %s with %d nodes and %d links",
            network_id, len(nodes), len(links),
        )
        return NetworkData(metadata=metadata, nodes=nodes, links=links)

    def _initial_allocation(self) -> float:
        low, high = INITIAL_ALLOCATION_RANGE
        return low + self._rng.random() * (high - low)
