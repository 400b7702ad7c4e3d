"""
Units of work handed out by the coordinator.

A task is one of two variants, told apart by its ``kind`` tag rather than
by its class: ``MapUnit`` transforms one input into partitioned output and
``ReduceUnit`` consumes every intermediate artifact of one partition.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union


class TaskKind(Enum):
    """Variant tag of a task"""
    MAP = "map"
    REDUCE = "reduce"


@dataclass(frozen=True)
class MapUnit:
    """A map task: one input reference, partitioned into partition_count buckets"""
    id: int
    input_ref: str
    partition_count: int
    kind: TaskKind = field(default=TaskKind.MAP, init=False)

    def __str__(self):
        return f"MapUnit({self.id}, input={self.input_ref})"


@dataclass(frozen=True)
class ReduceUnit:
    """A reduce task; its id is the partition id it was created for"""
    id: int
    input_refs: Tuple[str, ...] = ()
    kind: TaskKind = field(default=TaskKind.REDUCE, init=False)

    @property
    def partition_id(self) -> int:
        return self.id

    def __str__(self):
        return f"ReduceUnit({self.id}, inputs={len(self.input_refs)})"


Task = Union[MapUnit, ReduceUnit]
