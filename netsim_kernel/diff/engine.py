"""
Diff Engine — sparse changeset between two snapshots of the same network.

Resources are paired by position. Both snapshots must list the same node
ids and link endpoints in the same order; anything else is a state
management bug and fails loudly.
"""

from typing import Dict, List

from netsim_kernel.models.diff import NetworkDiff, ResourceChange
from netsim_kernel.models.network import Link, MetricData, NetworkData, Node


class SnapshotMismatchError(Exception):
    """Raised when two snapshots do not describe the same resources."""
    pass


class DiffEngine:
    """Computes which nodes and links changed between two snapshots."""

    def __init__(self, include_history: bool = True):
        self.include_history = include_history

    def diff(self, old: NetworkData, new: NetworkData) -> NetworkDiff:
        if old.metadata.id != new.metadata.id:
            raise SnapshotMismatchError(
                f"Cannot diff network {old.metadata.id} against {new.metadata.id}"
            )
        return NetworkDiff(
            timestamp=new.metadata.last_updated,
            node_changes=self._node_changes(old.nodes, new.nodes),
            link_changes=self._link_changes(old.links, new.links),
        )

    def _node_changes(
        self, old_nodes: List[Node], new_nodes: List[Node]
    ) -> Dict[str, ResourceChange]:
        if len(old_nodes) != len(new_nodes):
            raise SnapshotMismatchError(
                f"Node count changed from {len(old_nodes)} to {len(new_nodes)}"
            )
        changes = {}
        for position, (old_node, new_node) in enumerate(zip(old_nodes, new_nodes)):
            if old_node.id != new_node.id:
                raise SnapshotMismatchError(
                    f"Node {position} is {old_node.id} before and {new_node.id} after"
                )
            if self._changed(old_node.metrics, new_node.metrics):
                changes[new_node.id] = self._change(new_node.metrics)
        return changes

    def _link_changes(
        self, old_links: List[Link], new_links: List[Link]
    ) -> Dict[str, ResourceChange]:
        if len(old_links) != len(new_links):
            raise SnapshotMismatchError(
                f"Link count changed from {len(old_links)} to {len(new_links)}"
            )
        changes = {}
        for old_link, new_link in zip(old_links, new_links):
            if old_link.resource_id != new_link.resource_id:
                raise SnapshotMismatchError(
                    f"Link {old_link.resource_id} paired with {new_link.resource_id}"
                )
            if self._changed(old_link.metrics, new_link.metrics):
                changes[new_link.resource_id] = self._change(new_link.metrics)
        return changes

    @staticmethod
    def _changed(old: MetricData, new: MetricData) -> bool:
        return (
            old.current != new.current
            or old.history != new.history
            or old.alerts != new.alerts
        )

    def _change(self, metrics: MetricData) -> ResourceChange:
        return ResourceChange(
            current=metrics.current.model_copy(),
            alerts=[a.model_copy() for a in metrics.alerts],
            history=list(metrics.history) if self.include_history else None,
        )
