"""Scheduling state, phase barrier and run metrics."""

from mrsim.coordinator.coordinator import Coordinator, Phase, derive_partition_count
from mrsim.coordinator.metrics import MetricsCollector, RunMetrics

__all__ = ["Coordinator", "Phase", "derive_partition_count", "MetricsCollector", "RunMetrics"]
