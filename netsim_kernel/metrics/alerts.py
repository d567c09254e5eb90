"""Alert Classifier — threshold alerts on allocation."""

from typing import List

from netsim_kernel.models.network import Alert, AlertType

DEFAULT_WARNING_THRESHOLD = 75.0
DEFAULT_CRITICAL_THRESHOLD = 90.0


def classify_allocation(
    value: float,
    timestamp: str,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD,
) -> List[Alert]:
    """
    Return at most one alert for an allocation value.
    Critical supersedes warning; both bounds are inclusive.
    """
    if value >= critical_threshold:
        return [Alert(
            type=AlertType.CRITICAL,
            message=f"allocation critically high: {value:.1f}%",
            timestamp=timestamp,
        )]
    if value >= warning_threshold:
        return [Alert(
            type=AlertType.WARNING,
            message=f"allocation warning: {value:.1f}%",
            timestamp=timestamp,
        )]
    return []
