#!/usr/bin/env python3
"""
Map Task Executor
Executes a map unit by reading its input, applying the map function,
partitioning output by key, and writing one intermediate artifact per
non-empty partition
"""

import time
import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List

from mrsim.common.partitioner import partition
from mrsim.common.records import KeyValue
from mrsim.common.storage import ArtifactStore
from mrsim.common.tasks import MapUnit
from mrsim.errors import TaskExecutionError

logger = logging.getLogger(__name__)

MapFunction = Callable[[str], Iterable]


class MapExecutor:
    """Executes a single map unit"""

    def __init__(self, task: MapUnit, map_fn: MapFunction, store: ArtifactStore):
        """
        Initialize the map executor

        Args:
            task: Map unit to execute
            map_fn: Callable turning input content into KeyValue records
                (or (key, value) tuples)
            store: Artifact store used for all reads and writes
        """
        self.task = task
        self.map_fn = map_fn
        self.store = store

    def execute(self) -> Dict[int, str]:
        """
        Execute the map unit

        Returns:
            Mapping of partition id to intermediate artifact path, holding only
            the partitions that received at least one record

        Raises:
            TaskExecutionError: If the input cannot be read, the map function
                fails or emits a record the line format cannot hold, or an
                artifact cannot be written
        """
        start_time = time.time()
        task = self.task

        logger.info(f"Map task {task.id}: Reading input {task.input_ref}")
        read = self.store.read_text(task.input_ref)
        if not read.ok:
            raise TaskExecutionError(task, f"Map task {task.id} cannot read input: {read.error_message}")

        try:
            records = [KeyValue.coerce(r) for r in self.map_fn(read.data)]
        except Exception as e:
            raise TaskExecutionError(task, f"Map task {task.id}: map function failed: {e}") from e

        try:
            partitions = self._partition(records)
        except ValueError as e:
            raise TaskExecutionError(task, f"Map task {task.id}: unwritable record: {e}") from e
        logger.info(f"Map task {task.id}: Generated {len(records)} intermediate pairs "
                    f"across {len(partitions)} partitions")

        artifacts = {}
        for partition_id in sorted(partitions):
            path = self.store.intermediate_path(task.id, partition_id)
            written = self.store.write_lines(path, partitions[partition_id])
            if not written.ok:
                raise TaskExecutionError(
                    task, f"Map task {task.id} cannot write {path}: {written.error_message}")
            artifacts[partition_id] = path

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(f"Map task {task.id}: Completed in {execution_time}ms")
        return artifacts

    def _partition(self, records: List[KeyValue]) -> Dict[int, List[str]]:
        """
        Route each record to its partition buffer

        Returns:
            Dictionary mapping partition_id to '<key> <value>' lines
        """
        buffers = defaultdict(list)
        for record in records:
            partition_id = partition(record.key, self.task.partition_count)
            buffers[partition_id].append(record.to_line())
        return dict(buffers)
