"""Data types and helpers shared by the coordinator and workers."""

from mrsim.common.records import KeyValue
from mrsim.common.tasks import MapUnit, ReduceUnit, Task, TaskKind
from mrsim.common.partitioner import partition, stable_hash

__all__ = [
    "KeyValue",
    "MapUnit",
    "ReduceUnit",
    "Task",
    "TaskKind",
    "partition",
    "stable_hash",
]
