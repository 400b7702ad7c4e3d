"""
Run configuration and logging setup for the command line and benchmark
entry points. The library itself never reads the environment.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Defaults when the environment does not override them
DEFAULT_WORK_DIR = './mr-work'
DEFAULT_LOG_LEVEL = 'INFO'
DEFAULT_WORDS_PER_PARTITION = 2


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class JobConfig:
    """Settings for one run; None means derive the value from the inputs"""
    work_dir: str = DEFAULT_WORK_DIR
    num_workers: Optional[int] = None
    partition_count: Optional[int] = None
    words_per_partition: int = DEFAULT_WORDS_PER_PARTITION
    wait_timeout: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "JobConfig":
        """Build a config from MRSIM_* environment variables"""
        words_per_partition = _env_int('MRSIM_WORDS_PER_PARTITION')
        if words_per_partition is None:
            words_per_partition = DEFAULT_WORDS_PER_PARTITION
        elif words_per_partition < 1:
            raise ValueError(f"MRSIM_WORDS_PER_PARTITION must be >= 1, got {words_per_partition}")

        return cls(
            work_dir=os.getenv('MRSIM_WORK_DIR', DEFAULT_WORK_DIR),
            num_workers=_env_int('MRSIM_NUM_WORKERS'),
            partition_count=_env_int('MRSIM_PARTITIONS'),
            words_per_partition=words_per_partition,
            wait_timeout=_env_float('MRSIM_WAIT_TIMEOUT'),
            log_level=os.getenv('MRSIM_LOG_LEVEL', DEFAULT_LOG_LEVEL),
        )


def configure_logging(level: str = DEFAULT_LOG_LEVEL):
    """Configure root logging the same way for every entry point"""
    numeric = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)
