#!/usr/bin/env python3
"""
Job Runner
Builds a Coordinator for one run, drives a fixed pool of Worker threads
against it, and collects outputs and metrics
"""

import os
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from mrsim.common.storage import ArtifactStore
from mrsim.coordinator.coordinator import Coordinator, Phase, derive_partition_count
from mrsim.coordinator.metrics import MetricsCollector, RunMetrics
from mrsim.errors import JobFailedError
from mrsim.worker.map_executor import MapFunction
from mrsim.worker.reduce_executor import ReduceFunction
from mrsim.worker.worker import Worker

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Outcome of a finished run"""
    run_id: str
    output_files: List[str]
    status: Dict
    metrics: RunMetrics
    tasks_per_worker: List[int] = field(default_factory=list)

    def read_output(self) -> Dict[str, str]:
        """Merge every output artifact into a key -> result dictionary"""
        return read_outputs(self.output_files)


def read_outputs(paths: Sequence[str]) -> Dict[str, str]:
    """
    Parse '<key> <result>' lines from final output artifacts.

    Keys never contain whitespace, so everything after the first space is
    the result, which may be empty.
    """
    merged = {}
    for path in paths:
        with open(path, 'r', encoding='utf-8') as f:
            for line in f.read().splitlines():
                key, _, result = line.partition(' ')
                if key:
                    merged[key] = result
    return merged


def run_job(input_refs: Sequence[str], map_fn: MapFunction, reduce_fn: ReduceFunction, *,
            work_dir: str, num_workers: Optional[int] = None,
            partition_count: Optional[int] = None, words_per_partition: int = 2,
            wait_timeout: Optional[float] = None) -> JobResult:
    """
    Run a complete MapReduce job in this process.

    Args:
        input_refs: Input file paths, one map unit each
        map_fn: content -> iterable of KeyValue or (key, value)
        reduce_fn: (key, values) -> result
        work_dir: Directory for intermediate and output artifacts
        num_workers: Worker pool size; defaults to one per input
        partition_count: Number of partitions; derived from the input word
            count when omitted
        words_per_partition: Words per partition when deriving partition_count
        wait_timeout: Seconds a worker may wait for its next task

    Returns:
        JobResult with output paths, final status and metrics

    Raises:
        JobFailedError: If any task fails
    """
    run_id = uuid.uuid4().hex[:8]
    input_refs = list(input_refs)
    store = ArtifactStore(work_dir)
    removed, _ = store.clear()
    if removed:
        logger.info(f"Removed {removed} artifacts left by an earlier run")

    if partition_count is None:
        try:
            partition_count = derive_partition_count(input_refs, words_per_partition)
        except OSError as e:
            raise JobFailedError(f"Cannot size partitions: {e}") from e
    if num_workers is None:
        num_workers = max(1, len(input_refs))
    if num_workers < 1:
        raise ValueError(f"num_workers must be >= 1, got {num_workers}")

    collector = MetricsCollector(run_id, input_refs, num_workers, store)
    coordinator = Coordinator(input_refs, partition_count,
                              on_phase_change=collector.on_phase_change)

    logger.info(f"Run {run_id}: {len(input_refs)} inputs, {partition_count} partitions, "
                f"{num_workers} workers, work dir {store.work_dir}")

    workers = [
        Worker(i, coordinator, map_fn, reduce_fn, store, wait_timeout=wait_timeout)
        for i in range(num_workers)
    ]
    first_error = None
    tasks_per_worker = []
    with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="mr-worker") as pool:
        futures = [pool.submit(worker.run) for worker in workers]
        for future in futures:
            try:
                tasks_per_worker.append(future.result())
            except Exception as e:
                tasks_per_worker.append(0)
                if first_error is None:
                    first_error = e

    status = coordinator.get_status()
    metrics = collector.finish(partition_count, coordinator.phase)

    if first_error is not None or coordinator.phase is not Phase.DONE:
        message = coordinator.error_message or (str(first_error) if first_error else "run did not finish")
        logger.error(f"Run {run_id} failed: {message}")
        raise JobFailedError(message) from first_error

    output_files = [path for path in (store.output_path(p) for p in range(partition_count))
                    if os.path.exists(path)]
    logger.info(f"Run {run_id} completed in {metrics.total_time_seconds:.3f}s, "
                f"{len(output_files)} output files")
    return JobResult(
        run_id=run_id,
        output_files=output_files,
        status=status,
        metrics=metrics,
        tasks_per_worker=tasks_per_worker,
    )
