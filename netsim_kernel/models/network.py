"""Network Data — the hierarchical graph served to the visualization client."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as the second-resolution UTC string used on the wire."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeType(str, Enum):
    LEAF = "leaf"
    CLUSTER = "cluster"


class AlertType(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class Alert(WireModel):
    """A threshold alert raised on a resource's allocation."""

    type: AlertType
    message: str
    timestamp: str


class MetricSample(WireModel):
    """One retained history point."""

    timestamp: str
    value: float


class CurrentMetrics(WireModel):
    """
    Latest metric values for a resource.

    `allocation` is always present. Additional metric names are kept as
    extra fields so seed files can carry them through.
    """

    model_config = ConfigDict(extra="allow")

    allocation: float = Field(ge=0, le=100)
    timestamp: str


class MetricData(WireModel):
    current: CurrentMetrics
    history: List[MetricSample] = []
    alerts: List[Alert] = Field(default=[], max_length=1)


class NetworkMetadata(WireModel):
    id: str
    parent_network: Optional[str] = None
    description: Optional[str] = None
    last_updated: str                       # ISO-8601
    update_interval: int = 5000             # ms, advisory refresh hint
    retention_period: int = 3600            # seconds, advisory only


class Node(WireModel):
    id: str
    x: float
    y: float
    type: NodeType = NodeType.LEAF
    child_network: Optional[str] = None     # Set when type == cluster
    metrics: MetricData


class Link(WireModel):
    source: str
    target: str
    metrics: MetricData

    @property
    def resource_id(self) -> str:
        return f"{self.source}->{self.target}"


class NetworkData(WireModel):
    """A complete snapshot of one network."""

    metadata: NetworkMetadata
    nodes: List[Node] = []
    links: List[Link] = []

    @model_validator(mode="after")
    def _check_graph(self) -> "NetworkData":
        node_ids = [n.id for n in self.nodes]
        if len(set(node_ids)) != len(node_ids):
            raise ValueError(f"duplicate node ids in network {self.metadata.id}")

        known = set(node_ids)
        seen_pairs = set()
        for link in self.links:
            if link.source not in known or link.target not in known:
                raise ValueError(
                    f"link {link.resource_id} references a node outside "
                    f"network {self.metadata.id}"
                )
            if link.source == link.target:
                raise ValueError(f"self loop on node {link.source}")
            pair = frozenset((link.source, link.target))
            if pair in seen_pairs:
                raise ValueError(f"duplicate link between {link.source} and {link.target}")
            seen_pairs.add(pair)
        return self

    def to_payload(self) -> dict:
        """Serializable form with the client's field names."""
        return self.model_dump(mode="json", by_alias=True)
