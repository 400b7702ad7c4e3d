"""
Deterministic key partitioning.

Every occurrence of a key, from every map unit, must land in the same
partition. The built-in ``hash()`` is salted per interpreter process, so the
partitioner hashes the key's UTF-8 bytes with MD5 instead.
"""

import hashlib


def stable_hash(key: str) -> int:
    """Non-negative 31-bit hash of the key's UTF-8 bytes"""
    digest = hashlib.md5(key.encode("utf-8")).hexdigest()
    return int(digest, 16) & 0x7fffffff


def partition(key: str, partition_count: int) -> int:
    """
    Map a key to a partition id.

    Args:
        key: Record key
        partition_count: Number of partitions, at least 1

    Returns:
        Partition id in [0, partition_count)

    Raises:
        ValueError: If partition_count is less than 1
    """
    if partition_count < 1:
        raise ValueError(f"partition_count must be >= 1, got {partition_count}")
    return stable_hash(key) % partition_count
