"""
Unit tests for the stable partitioner
"""

import hashlib
from concurrent.futures import ThreadPoolExecutor

import pytest

from mrsim.common.partitioner import partition, stable_hash


class TestStableHash:
    """Tests for the process-independent hash"""

    def test_matches_md5_of_utf8_bytes(self):
        """Hash is the low 31 bits of the key's MD5 digest"""
        expected = int(hashlib.md5("apple".encode("utf-8")).hexdigest(), 16) & 0x7fffffff
        assert stable_hash("apple") == expected

    def test_hash_is_non_negative(self):
        for key in ["", "a", "zebra", "ümlaut", "日本語", "x" * 1000]:
            assert 0 <= stable_hash(key) <= 0x7fffffff


class TestPartition:
    """Tests for key -> partition routing"""

    def test_same_key_same_partition(self):
        """Repeated calls agree"""
        assert partition("foo", 7) == partition("foo", 7)

    def test_result_in_range(self):
        for partition_count in (1, 2, 3, 10, 97):
            for i in range(200):
                assert 0 <= partition(f"key{i}", partition_count) < partition_count

    def test_single_partition_always_zero(self):
        assert {partition(f"key{i}", 1) for i in range(50)} == {0}

    def test_agrees_across_threads(self):
        """Every worker thread routes a key to the same partition"""
        keys = [f"word{i}" for i in range(100)]
        expected = [partition(k, 5) for k in keys]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: [partition(k, 5) for k in keys], range(8)))

        assert all(r == expected for r in results)

    def test_spreads_keys(self):
        """Many distinct keys use more than one partition"""
        used = {partition(f"key{i}", 4) for i in range(100)}
        assert len(used) > 1

    @pytest.mark.parametrize("partition_count", [0, -1])
    def test_invalid_partition_count(self, partition_count):
        with pytest.raises(ValueError):
            partition("foo", partition_count)
