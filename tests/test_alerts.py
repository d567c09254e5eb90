"""Tests for allocation alert classification."""

from netsim_kernel.metrics.alerts import classify_allocation
from netsim_kernel.models.network import AlertType

TS = "2026-01-01T00:00:00Z"


class TestClassifyAllocation:
    def test_below_warning(self):
        assert classify_allocation(74.9, TS) == []

    def test_warning_is_inclusive(self):
        alerts = classify_allocation(75.0, TS)
        assert len(alerts) == 1
        assert alerts[0].type == AlertType.WARNING
        assert alerts[0].message == "allocation warning: 75.0%"
        assert alerts[0].timestamp == TS

    def test_critical_is_inclusive(self):
        alerts = classify_allocation(90.0, TS)
        assert len(alerts) == 1
        assert alerts[0].type == AlertType.CRITICAL
        assert alerts[0].message == "allocation critically high: 90.0%"

    def test_never_both(self):
        for value in (0.0, 50.0, 75.0, 80.0, 89.99, 90.0, 95.0, 100.0):
            assert len(classify_allocation(value, TS)) <= 1

    def test_message_rounds_to_one_decimal(self):
        alerts = classify_allocation(93.26, TS)
        assert alerts[0].message == "allocation critically high: 93.3%"

    def test_custom_thresholds(self):
        assert classify_allocation(60.0, TS, warning_threshold=50, critical_threshold=70)[0].type == AlertType.WARNING
        assert classify_allocation(70.0, TS, warning_threshold=50, critical_threshold=70)[0].type == AlertType.CRITICAL
        assert classify_allocation(85.0, TS, warning_threshold=95, critical_threshold=99) == []
