"""
Worker: a sequential execution agent that pulls tasks from the coordinator,
runs them, and reports completion until no more work will be issued.
"""

import logging
from typing import Optional

from mrsim.common.storage import ArtifactStore
from mrsim.common.tasks import Task, TaskKind
from mrsim.coordinator.coordinator import Coordinator
from mrsim.errors import TaskWaitTimeout
from mrsim.worker.map_executor import MapExecutor, MapFunction
from mrsim.worker.reduce_executor import ReduceExecutor, ReduceFunction

logger = logging.getLogger(__name__)


class Worker:
    """Pull/execute loop bound to one shared Coordinator"""

    def __init__(self, worker_id: int, coordinator: Coordinator, map_fn: MapFunction,
                 reduce_fn: ReduceFunction, store: ArtifactStore,
                 wait_timeout: Optional[float] = None):
        self.worker_id = worker_id
        self.coordinator = coordinator
        self.map_fn = map_fn
        self.reduce_fn = reduce_fn
        self.store = store
        self.wait_timeout = wait_timeout

        self.maps_executed = 0
        self.reduces_executed = 0
        self.current_task: Optional[Task] = None

    def run(self) -> int:
        """
        Main worker loop: request and execute tasks until the coordinator
        returns None.

        A task failure is reported to the coordinator, which fails the run and
        releases every other worker, and then re-raised.

        Returns:
            Number of tasks executed by this worker
        """
        logger.info(f"Worker {self.worker_id}: starting")
        while True:
            try:
                task = self.coordinator.request_task(timeout=self.wait_timeout)
            except TaskWaitTimeout as e:
                logger.error(f"Worker {self.worker_id}: {e}")
                self.coordinator.report_failure(None, e)
                raise

            if task is None:
                break

            self.current_task = task
            try:
                self._execute(task)
            except Exception as e:
                logger.error(f"Worker {self.worker_id}: {task} failed: {e}")
                self.coordinator.report_failure(task, e)
                raise
            finally:
                self.current_task = None

        executed = self.maps_executed + self.reduces_executed
        logger.info(f"Worker {self.worker_id}: exiting after {self.maps_executed} map "
                    f"and {self.reduces_executed} reduce tasks")
        return executed

    def _execute(self, task: Task):
        if task.kind is TaskKind.MAP:
            artifacts = MapExecutor(task, self.map_fn, self.store).execute()
            self.coordinator.report_map_done(task, artifacts)
            self.maps_executed += 1
        elif task.kind is TaskKind.REDUCE:
            ReduceExecutor(task, self.reduce_fn, self.store).execute()
            self.coordinator.report_reduce_done(task)
            self.reduces_executed += 1
        else:
            raise ValueError(f"Unknown task kind: {task.kind}")
