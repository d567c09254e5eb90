"""Network Diff — sparse changeset between two snapshots."""

from typing import Dict, List, Optional

from netsim_kernel.models.network import Alert, CurrentMetrics, MetricSample, WireModel


class ResourceChange(WireModel):
    """New metric state for one node or link that changed."""

    current: CurrentMetrics
    alerts: List[Alert] = []
    history: Optional[List[MetricSample]] = None


class NetworkDiff(WireModel):
    timestamp: str                          # lastUpdated of the newer snapshot
    node_changes: Dict[str, ResourceChange] = {}
    link_changes: Dict[str, ResourceChange] = {}   # Keyed by "source->target"

    @property
    def is_empty(self) -> bool:
        return not self.node_changes and not self.link_changes

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
