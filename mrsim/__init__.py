"""
In-process MapReduce simulator.

A Coordinator hands map units and then reduce units to a pool of Worker
threads; ``run_job`` wires them together for a single run.
"""

from mrsim.common.records import KeyValue
from mrsim.common.tasks import MapUnit, ReduceUnit, TaskKind
from mrsim.common.partitioner import partition
from mrsim.coordinator.coordinator import Coordinator, Phase
from mrsim.worker.worker import Worker
from mrsim.client.runner import JobResult, run_job
from mrsim.errors import JobFailedError, MapReduceError, TaskExecutionError, TaskWaitTimeout

__version__ = "0.1.0"

__all__ = [
    "KeyValue",
    "MapUnit",
    "ReduceUnit",
    "TaskKind",
    "partition",
    "Coordinator",
    "Phase",
    "Worker",
    "JobResult",
    "run_job",
    "JobFailedError",
    "MapReduceError",
    "TaskExecutionError",
    "TaskWaitTimeout",
]
