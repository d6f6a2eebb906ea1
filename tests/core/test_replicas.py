"""Tests for ReplicaPool."""

import pytest

from drivefetch.core.replicas import ReplicaPool


class TestReplicaPool:
    def test_normalizes_endpoints(self):
        pool = ReplicaPool([" https://a:3001/ ", "https://b:3001", "", "  "])
        assert pool.endpoints == ("https://a:3001", "https://b:3001")
        assert len(pool) == 2

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError, match="at least one endpoint"):
            ReplicaPool([])

    def test_select_wraps_modulo(self):
        pool = ReplicaPool(["a", "b", "c"])
        assert [pool.select(i) for i in range(7)] == ["a", "b", "c", "a", "b", "c", "a"]

    def test_next_is_round_robin(self):
        pool = ReplicaPool(["a", "b"])
        assert [pool.next() for _ in range(5)] == ["a", "b", "a", "b", "a"]

    def test_iterates_in_order(self):
        assert list(ReplicaPool(["x", "y"])) == ["x", "y"]
