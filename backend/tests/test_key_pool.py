import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from key_pool import ApiKeyPool


class TestApiKeyPool:
    def test_rotates_in_order(self):
        pool = ApiKeyPool(["k1", "k2", "k3"])
        picked = [pool.next().value for _ in range(4)]
        assert picked == ["k1", "k2", "k3", "k1"]

    def test_skips_unhealthy(self):
        pool = ApiKeyPool(["k1", "k2", "k3"])
        pool.mark_unhealthy(1)
        picked = [pool.next().index for _ in range(4)]
        assert picked == [0, 2, 0, 2]

    def test_self_heals_when_all_unhealthy(self):
        pool = ApiKeyPool(["k1", "k2"])
        pool.mark_unhealthy(0)
        pool.mark_unhealthy(1)
        assert pool.health == [False, False]
        key = pool.next()
        assert key is not None
        assert pool.health == [True, True]

    def test_empty_pool(self):
        pool = ApiKeyPool([])
        assert len(pool) == 0
        assert pool.next() is None

    def test_mark_out_of_range_is_ignored(self):
        pool = ApiKeyPool(["k1"])
        pool.mark_unhealthy(5)
        assert pool.health == [True]

    def test_length_is_fixed(self):
        keys = ["k1", "k2"]
        pool = ApiKeyPool(keys)
        keys.append("k3")
        assert len(pool) == 2

    def test_masked_key(self):
        pool = ApiKeyPool(["sk-or-v1-abcdefghijklmnop"])
        assert pool.next().masked() == "sk-or-v1-a..."
