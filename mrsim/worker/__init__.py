"""Worker loop and the map/reduce task executors."""

from mrsim.worker.map_executor import MapExecutor
from mrsim.worker.reduce_executor import ReduceExecutor
from mrsim.worker.worker import Worker

__all__ = ["MapExecutor", "ReduceExecutor", "Worker"]
