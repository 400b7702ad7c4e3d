#!/usr/bin/env python3
"""
Artifact Store
Names intermediate and final artifacts inside a work directory and performs
all file I/O for workers. Every operation returns an IOResult instead of
raising, so the caller decides which failures are fatal.
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass
class IOResult:
    """Outcome of a single read or write"""
    ok: bool
    path: str
    data: Optional[str] = None
    error_message: str = ""

    @classmethod
    def success(cls, path: str, data: Optional[str] = None) -> "IOResult":
        return cls(ok=True, path=path, data=data)

    @classmethod
    def failure(cls, path: str, error: Exception) -> "IOResult":
        return cls(ok=False, path=path, error_message=f"{type(error).__name__}: {error}")


def intermediate_name(map_id: int, partition_id: int) -> str:
    """Artifact name for one (map unit, partition) pair"""
    return f"mr-{map_id}-{partition_id}"


def output_name(reduce_id: int) -> str:
    """Artifact name for the final output of one reduce unit"""
    return f"output-{reduce_id}"


class ArtifactStore:
    """Reads inputs and reads/writes artifacts under a single work directory"""

    def __init__(self, work_dir: str):
        """
        Initialize the store

        Args:
            work_dir: Directory that receives intermediate and output artifacts.
                Created on first write if it does not exist.
        """
        self.work_dir = os.path.abspath(work_dir)

    def intermediate_path(self, map_id: int, partition_id: int) -> str:
        return os.path.join(self.work_dir, intermediate_name(map_id, partition_id))

    def output_path(self, reduce_id: int) -> str:
        return os.path.join(self.work_dir, output_name(reduce_id))

    def read_text(self, path: str) -> IOResult:
        """
        Read a whole file as UTF-8 text

        Args:
            path: File to read (input reference or artifact reference)

        Returns:
            IOResult with the content in ``data`` on success
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return IOResult.success(path, f.read())
        except (OSError, UnicodeDecodeError) as e:
            return IOResult.failure(path, e)

    def write_lines(self, path: str, lines: Iterable[str]) -> IOResult:
        """
        Atomically write lines to a file

        The lines are written to a temporary file in the same directory and
        renamed into place, so readers never see a partial artifact.

        Args:
            path: Destination path
            lines: Lines without trailing newlines

        Returns:
            IOResult describing the outcome
        """
        temp_path = None
        try:
            directory = os.path.dirname(path) or "."
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=f".{os.path.basename(path)}-", dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                for line in lines:
                    f.write(line + '\n')
            os.replace(temp_path, path)
            return IOResult.success(path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            return IOResult.failure(path, e)

    def list_outputs(self) -> List[str]:
        """Paths of all final output artifacts, ordered by reduce id"""
        if not os.path.isdir(self.work_dir):
            return []
        prefix = "output-"
        found = []
        for name in os.listdir(self.work_dir):
            suffix = name[len(prefix):]
            if name.startswith(prefix) and suffix.isdigit():
                found.append((int(suffix), os.path.join(self.work_dir, name)))
        return [path for _, path in sorted(found)]

    def total_size(self, prefix: str) -> int:
        """Total size in bytes of artifacts whose names start with prefix"""
        if not os.path.isdir(self.work_dir):
            return 0
        total = 0
        for name in os.listdir(self.work_dir):
            if name.startswith(prefix):
                total += os.path.getsize(os.path.join(self.work_dir, name))
        return total

    def clear(self, dry_run: bool = False) -> Tuple[int, int]:
        """
        Remove intermediate and output artifacts left by earlier runs.

        Only files named like artifacts are touched.

        Args:
            dry_run: If True, only count what would be deleted

        Returns:
            tuple: (files_deleted, bytes_freed)
        """
        if not os.path.isdir(self.work_dir):
            return 0, 0

        files_deleted = 0
        bytes_freed = 0
        for name in sorted(os.listdir(self.work_dir)):
            if not _is_artifact_name(name):
                continue
            path = os.path.join(self.work_dir, name)
            if not os.path.isfile(path):
                continue
            size = os.path.getsize(path)
            if not dry_run:
                os.remove(path)
            files_deleted += 1
            bytes_freed += size
        return files_deleted, bytes_freed


def _is_artifact_name(name: str) -> bool:
    for prefix in ("mr-", "output-"):
        if name.startswith(prefix):
            return all(part.isdigit() for part in name[len(prefix):].split("-"))
    return False
