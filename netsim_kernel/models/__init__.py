"""Network simulator data models."""

from netsim_kernel.models.diff import NetworkDiff, ResourceChange
from netsim_kernel.models.network import (
    Alert,
    AlertType,
    CurrentMetrics,
    Link,
    MetricData,
    MetricSample,
    NetworkData,
    NetworkMetadata,
    Node,
    NodeType,
    format_timestamp,
)
from netsim_kernel.models.simulator import SimulatorConfig
from netsim_kernel.models.waveform import WaveformPattern

__all__ = [
    "Alert",
    "AlertType",
    "CurrentMetrics",
    "Link",
    "MetricData",
    "MetricSample",
    "NetworkData",
    "NetworkDiff",
    "NetworkMetadata",
    "Node",
    "NodeType",
    "ResourceChange",
    "SimulatorConfig",
    "WaveformPattern",
    "format_timestamp",
]
