"""
Exception types raised by the MapReduce simulator.
"""


class MapReduceError(Exception):
    """Base class for all simulator errors"""


class TaskExecutionError(MapReduceError):
    """A map or reduce task could not be completed"""

    def __init__(self, task, message: str):
        super().__init__(message)
        self.task = task


class JobFailedError(MapReduceError):
    """The run ended in the FAILED phase"""


class TaskWaitTimeout(MapReduceError, TimeoutError):
    """A worker waited longer than allowed for the next task"""
