"""
Performance metrics collection for MapReduce runs.
"""

import os
import time
import json
import threading
from dataclasses import dataclass, asdict
from typing import Optional, Sequence

import psutil

from mrsim.common.storage import ArtifactStore
from mrsim.coordinator.coordinator import Phase


@dataclass
class RunMetrics:
    """Metrics for a single MapReduce run."""

    run_id: str
    start_time: float
    end_time: float
    map_phase_start: float
    map_phase_end: float
    reduce_phase_start: float
    reduce_phase_end: float
    num_map_tasks: int
    num_reduce_tasks: int
    num_workers: int
    input_size_bytes: int
    intermediate_size_bytes: int = 0
    output_size_bytes: int = 0
    peak_rss_bytes: int = 0
    final_phase: str = ""

    @property
    def total_time_seconds(self) -> float:
        """Total run time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    def to_dict(self) -> dict:
        """Convert metrics to dictionary, including derived durations."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        data['map_phase_time_seconds'] = self.map_phase_time_seconds
        data['reduce_phase_time_seconds'] = self.reduce_phase_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """
    Collects metrics for one run.

    ``on_phase_change`` is meant to be passed to the Coordinator. Phase
    boundaries use the times the coordinator recorded under its lock, so a
    late REDUCING call cannot land after DONE.
    """

    def __init__(self, run_id: str, input_refs: Sequence[str], num_workers: int,
                 store: ArtifactStore):
        self.store = store
        self.process = psutil.Process()
        self._lock = threading.Lock()

        input_size = sum(os.path.getsize(ref) for ref in input_refs if os.path.exists(ref))
        now = time.time()
        self.metrics = RunMetrics(
            run_id=run_id,
            start_time=now,
            end_time=0,
            map_phase_start=now,
            map_phase_end=0,
            reduce_phase_start=0,
            reduce_phase_end=0,
            num_map_tasks=len(input_refs),
            num_reduce_tasks=0,
            num_workers=num_workers,
            input_size_bytes=input_size,
        )
        self.sample_memory()

    def sample_memory(self):
        """Record current resident set size if it is a new peak."""
        rss = self.process.memory_info().rss
        with self._lock:
            if rss > self.metrics.peak_rss_bytes:
                self.metrics.peak_rss_bytes = rss

    def on_phase_change(self, phase: Phase, changed_at: Optional[float] = None):
        """
        Record a phase transition reported by the coordinator.

        Args:
            phase: The phase that was entered
            changed_at: When it was entered; defaults to now
        """
        if changed_at is None:
            changed_at = time.time()
        with self._lock:
            if phase is Phase.REDUCING:
                self.metrics.map_phase_end = changed_at
                self.metrics.reduce_phase_start = changed_at
                self.metrics.intermediate_size_bytes = self.store.total_size("mr-")
            elif phase in (Phase.DONE, Phase.FAILED):
                self.metrics.reduce_phase_end = changed_at
                if not self.metrics.map_phase_end:
                    # failed while mapping, or REDUCING not delivered yet
                    self.metrics.map_phase_end = changed_at
        self.sample_memory()

    def finish(self, num_reduce_tasks: int, final_phase: Phase) -> RunMetrics:
        """Close the run and compute output size."""
        self.sample_memory()
        with self._lock:
            now = time.time()
            self.metrics.end_time = now
            if not self.metrics.map_phase_end:
                self.metrics.map_phase_end = now
            if not self.metrics.reduce_phase_start:
                self.metrics.reduce_phase_start = self.metrics.map_phase_end
            if not self.metrics.reduce_phase_end:
                self.metrics.reduce_phase_end = now
            self.metrics.num_reduce_tasks = num_reduce_tasks
            self.metrics.output_size_bytes = self.store.total_size("output-")
            self.metrics.final_phase = final_phase.value
            return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        """Retrieve the metrics collected so far."""
        return self.metrics
