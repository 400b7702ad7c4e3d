#!/usr/bin/env python3
"""
Coordinator for the in-process MapReduce simulator
Owns every piece of scheduling state: the pending task queues, the
partition -> intermediate artifact registry and the completion sets, and
enforces the map -> reduce phase barrier.
"""

import time
import logging
import threading
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from mrsim.common.tasks import MapUnit, ReduceUnit, Task, TaskKind
from mrsim.errors import TaskWaitTimeout

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Phase of a run"""
    MAPPING = "mapping"
    REDUCING = "reducing"
    DONE = "done"
    FAILED = "failed"


def derive_partition_count(input_refs: Sequence[str], words_per_partition: int = 2) -> int:
    """
    Derive a partition count from the total number of words in the inputs.

    One partition per ``words_per_partition`` whitespace-separated words,
    never fewer than one.

    Raises:
        OSError: If an input cannot be read
    """
    if words_per_partition < 1:
        raise ValueError(f"words_per_partition must be >= 1, got {words_per_partition}")

    total_words = 0
    for ref in input_refs:
        with open(ref, 'r', encoding='utf-8') as f:
            for line in f:
                total_words += len(line.split())
    return max(1, total_words // words_per_partition)


class Coordinator:
    """
    Hands out map and reduce units to workers and tracks their completion.

    All public operations run under one condition variable. ``request_task``
    parks the caller while map units are still in flight, so no worker can
    exit before the reduce units exist.
    """

    def __init__(self, input_refs: Sequence[str], partition_count: int,
                 on_phase_change: Optional[Callable[[Phase, float], None]] = None):
        """
        Initialize the coordinator

        Args:
            input_refs: Ordered input references, one map unit each
            partition_count: Number of partitions (and reduce units), at least 1
            on_phase_change: Optional callback invoked, outside the lock, with
                each new phase and the time.time() at which it was entered.
                Calls may arrive out of order, but the timestamps follow the
                order of the transitions themselves.
        """
        if partition_count < 1:
            raise ValueError(f"partition_count must be >= 1, got {partition_count}")

        self._partition_count = partition_count
        self._on_phase_change = on_phase_change
        self._cond = threading.Condition(threading.Lock())

        self._pending_map: Deque[MapUnit] = deque(
            MapUnit(i, ref, partition_count) for i, ref in enumerate(input_refs)
        )
        self._map_ids: FrozenSet[int] = frozenset(t.id for t in self._pending_map)
        self._pending_reduce: Deque[ReduceUnit] = deque()
        self._reduce_ids: FrozenSet[int] = frozenset()

        self._registry: Dict[int, List[str]] = {}
        self._completed_map = set()
        self._completed_reduce = set()

        self._phase = Phase.MAPPING
        self.error_message = ""

        logger.info(f"Coordinator initialized with {len(self._map_ids)} map tasks "
                    f"and {partition_count} partitions")

        if not self._map_ids:
            with self._cond:
                changed_at = self._fire_barrier()
            self._notify(Phase.REDUCING, changed_at)

    @property
    def partition_count(self) -> int:
        return self._partition_count

    @property
    def num_map_tasks(self) -> int:
        return len(self._map_ids)

    @property
    def phase(self) -> Phase:
        with self._cond:
            return self._phase

    def request_task(self, timeout: Optional[float] = None) -> Optional[Task]:
        """
        Issue the next task.

        Map units are issued first, then reduce units. While the run is still
        mapping and every map unit has been issued, the caller waits until the
        barrier fires or the run fails.

        Args:
            timeout: Maximum seconds to wait for work; None waits indefinitely

        Returns:
            The next task, or None once no more work will ever be issued

        Raises:
            TaskWaitTimeout: If the wait exceeds ``timeout``
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._phase is Phase.FAILED:
                    return None
                if self._pending_map:
                    task = self._pending_map.popleft()
                    logger.debug(f"Issued {task}")
                    return task
                if self._pending_reduce:
                    task = self._pending_reduce.popleft()
                    logger.debug(f"Issued {task}")
                    return task
                if self._phase is not Phase.MAPPING:
                    return None

                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise TaskWaitTimeout(
                        f"No task became available within {timeout}s "
                        f"({len(self._completed_map)}/{len(self._map_ids)} map tasks done)"
                    )
                self._cond.wait(remaining)

    def report_map_done(self, task: MapUnit, partition_artifacts: Mapping[int, str]):
        """
        Record a finished map unit and its intermediate artifacts.

        The call that completes the last map unit builds one reduce unit per
        partition from the registry and enqueues them all at once.

        Args:
            task: The completed map unit
            partition_artifacts: partition id -> artifact reference, for the
                partitions that received at least one record

        Raises:
            ValueError: If the task is not a map unit or a partition id is out of range
        """
        if getattr(task, 'kind', None) is not TaskKind.MAP:
            raise ValueError(f"report_map_done expects a map unit, got {task!r}")
        items = sorted(partition_artifacts.items())
        for partition_id, _ in items:
            if isinstance(partition_id, bool) or not isinstance(partition_id, int) \
                    or not 0 <= partition_id < self._partition_count:
                raise ValueError(f"Invalid partition id {partition_id!r} reported by {task}")

        fired_at = None
        with self._cond:
            if self._phase is Phase.FAILED:
                logger.debug(f"Ignoring completion of {task}: run has failed")
                return
            if task.id not in self._map_ids:
                logger.warning(f"Ignoring completion of unknown map task {task.id}")
                return
            if task.id in self._completed_map:
                logger.warning(f"Ignoring duplicate completion of map task {task.id}")
                return

            for partition_id, artifact_ref in items:
                self._registry.setdefault(partition_id, []).append(artifact_ref)
            self._completed_map.add(task.id)
            logger.info(f"Map task {task.id} completed "
                        f"({len(self._completed_map)}/{len(self._map_ids)}), "
                        f"{len(items)} intermediate artifacts")

            if len(self._completed_map) == len(self._map_ids) and self._phase is Phase.MAPPING:
                fired_at = self._fire_barrier()

        if fired_at is not None:
            self._notify(Phase.REDUCING, fired_at)

    def report_reduce_done(self, task: ReduceUnit):
        """
        Record a finished reduce unit.

        Raises:
            ValueError: If the task is not a reduce unit
        """
        if getattr(task, 'kind', None) is not TaskKind.REDUCE:
            raise ValueError(f"report_reduce_done expects a reduce unit, got {task!r}")

        finished_at = None
        with self._cond:
            if self._phase is Phase.FAILED:
                logger.debug(f"Ignoring completion of {task}: run has failed")
                return
            if task.id not in self._reduce_ids:
                logger.warning(f"Ignoring completion of unknown reduce task {task.id}")
                return
            if task.id in self._completed_reduce:
                logger.warning(f"Ignoring duplicate completion of reduce task {task.id}")
                return

            self._completed_reduce.add(task.id)
            logger.info(f"Reduce task {task.id} completed "
                        f"({len(self._completed_reduce)}/{len(self._reduce_ids)})")

            if len(self._completed_reduce) == len(self._reduce_ids):
                self._phase = Phase.DONE
                finished_at = time.time()
                self._cond.notify_all()
                logger.info("All reduce tasks completed, run finished")

        if finished_at is not None:
            self._notify(Phase.DONE, finished_at)

    def report_failure(self, task: Optional[Task], error):
        """
        Mark the run as failed.

        Tasks are never reassigned, so a lost task means the run cannot finish.
        Every waiting worker is woken and receives None.
        """
        with self._cond:
            if self._phase in (Phase.DONE, Phase.FAILED):
                logger.debug(f"Ignoring failure of {task} in phase {self._phase.value}: {error}")
                return
            self._phase = Phase.FAILED
            failed_at = time.time()
            self.error_message = f"{task}: {error}" if task is not None else str(error)
            self._cond.notify_all()
            logger.error(f"Run failed: {self.error_message}")

        self._notify(Phase.FAILED, failed_at)

    def intermediate_artifacts(self, partition_id: int) -> Tuple[str, ...]:
        """Artifact references registered for a partition so far"""
        with self._cond:
            return tuple(self._registry.get(partition_id, ()))

    def completed_map_ids(self) -> FrozenSet[int]:
        with self._cond:
            return frozenset(self._completed_map)

    def completed_reduce_ids(self) -> FrozenSet[int]:
        with self._cond:
            return frozenset(self._completed_reduce)

    def is_done(self) -> bool:
        with self._cond:
            return self._phase is Phase.DONE

    def get_status(self) -> Dict:
        """Current phase with progress counters"""
        with self._cond:
            map_total = len(self._map_ids)
            reduce_total = self._partition_count
            completed = len(self._completed_map) + len(self._completed_reduce)
            total = map_total + reduce_total
            return {
                'status': self._phase.value,
                'progress': int(completed / total * 100) if total > 0 else 0,
                'map_completed': len(self._completed_map),
                'map_total': map_total,
                'reduce_completed': len(self._completed_reduce),
                'reduce_total': reduce_total,
                'error_message': self.error_message,
            }

    def _fire_barrier(self) -> float:
        # caller holds the lock; returns the transition time
        registry = {
            p: tuple(self._registry.get(p, ())) for p in range(self._partition_count)
        }
        self._registry = registry
        self._pending_reduce.extend(ReduceUnit(p, refs) for p, refs in registry.items())
        self._reduce_ids = frozenset(registry)
        self._phase = Phase.REDUCING
        changed_at = time.time()
        self._cond.notify_all()

        empty = sum(1 for refs in registry.values() if not refs)
        logger.info(f"Map phase complete, created {self._partition_count} reduce tasks "
                    f"({empty} with no intermediate data)")
        return changed_at

    def _notify(self, phase: Phase, changed_at: float):
        if self._on_phase_change is not None:
            self._on_phase_change(phase, changed_at)
