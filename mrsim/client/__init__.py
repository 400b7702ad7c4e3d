"""Run orchestration and the command line interface."""

from mrsim.client.runner import JobResult, read_outputs, run_job

__all__ = ["JobResult", "read_outputs", "run_job"]
