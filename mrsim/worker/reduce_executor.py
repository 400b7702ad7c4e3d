#!/usr/bin/env python3
"""
Reduce Task Executor
Executes a reduce unit by reading the intermediate artifacts of its
partition, grouping records by key, applying the reduce function, and
writing the final output artifact
"""

import time
import logging
from itertools import groupby
from operator import attrgetter
from typing import Callable, List, Optional

from mrsim.common.records import KeyValue, is_single_line, parse_line
from mrsim.common.storage import ArtifactStore
from mrsim.common.tasks import ReduceUnit
from mrsim.errors import TaskExecutionError

logger = logging.getLogger(__name__)

ReduceFunction = Callable[[str, List[str]], object]


class ReduceExecutor:
    """Executes a single reduce unit"""

    def __init__(self, task: ReduceUnit, reduce_fn: ReduceFunction, store: ArtifactStore):
        """
        Initialize the reduce executor

        Args:
            task: Reduce unit to execute
            reduce_fn: Callable (key, values) -> result, called once per key
            store: Artifact store used for all reads and writes
        """
        self.task = task
        self.reduce_fn = reduce_fn
        self.store = store

    def execute(self) -> Optional[str]:
        """
        Execute the reduce unit

        Returns:
            Path of the output artifact, or None when the partition received
            no intermediate artifacts

        Raises:
            TaskExecutionError: If the reduce function fails or returns a
                multi-line result, or the output cannot be written
        """
        start_time = time.time()
        task = self.task

        if not task.input_refs:
            logger.info(f"Reduce task {task.id}: No intermediate artifacts, nothing to do")
            return None

        records = self._read_intermediate()
        # stable sort: equal keys keep read order
        records.sort(key=attrgetter('key'))

        lines = []
        try:
            for key, group in groupby(records, key=attrgetter('key')):
                values = [kv.value for kv in group]
                result = str(self.reduce_fn(key, values))
                if not is_single_line(result):
                    raise ValueError(f"result {result!r} for key {key!r} spans lines")
                lines.append(f"{key} {result}")
        except Exception as e:
            raise TaskExecutionError(task, f"Reduce task {task.id}: reduce function failed: {e}") from e

        logger.info(f"Reduce task {task.id}: Reduced {len(records)} records into {len(lines)} keys")

        path = self.store.output_path(task.id)
        written = self.store.write_lines(path, lines)
        if not written.ok:
            raise TaskExecutionError(
                task, f"Reduce task {task.id} cannot write {path}: {written.error_message}")

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(f"Reduce task {task.id}: Wrote output to {path} in {execution_time}ms")
        return path

    def _read_intermediate(self) -> List[KeyValue]:
        """
        Read every intermediate artifact of the partition

        Missing or unreadable artifacts are skipped with a warning, and lines
        without two fields are skipped silently.

        Returns:
            KeyValue records in read order
        """
        records = []
        files_read = 0
        lines_skipped = 0

        for ref in self.task.input_refs:
            read = self.store.read_text(ref)
            if not read.ok:
                logger.warning(f"Reduce task {self.task.id}: Skipping intermediate artifact "
                               f"{ref}: {read.error_message}")
                continue
            files_read += 1

            for line in read.data.splitlines():
                record = parse_line(line)
                if record is None:
                    lines_skipped += 1
                    continue
                records.append(record)

        logger.debug(f"Reduce task {self.task.id}: Read {files_read} files, "
                     f"{len(records)} records, skipped {lines_skipped} malformed lines")
        return records
