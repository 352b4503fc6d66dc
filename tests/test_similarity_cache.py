import time
import unittest

from customer_matcher.cache import SimilarityCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestSimilarityCache(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = SimilarityCache(10, clock=self.clock)

    def test_get_within_ttl(self) -> None:
        self.cache.set(("a", "b"), 0.5)
        self.clock.now = 10
        self.assertEqual(self.cache.get(("a", "b")), 0.5)

    def test_expired_entry_is_evicted_on_read(self) -> None:
        self.cache.set(("a", "b"), 0.5)
        self.clock.now = 10.5
        self.assertIsNone(self.cache.get(("a", "b")))
        self.assertEqual(len(self.cache), 0)
        stats = self.cache.stats()
        self.assertEqual(stats.evictions, 1)
        self.assertEqual(stats.misses, 1)

    def test_key_order_matters(self) -> None:
        self.cache.set(("a", "b"), 0.5)
        self.assertIsNone(self.cache.get(("b", "a")))

    def test_sweep_removes_only_expired(self) -> None:
        self.cache.set("old", 1)
        self.clock.now = 5
        self.cache.set("new", 2)
        self.clock.now = 12
        self.assertEqual(self.cache.sweep(), 1)
        self.assertEqual(len(self.cache), 1)
        self.assertEqual(self.cache.get("new"), 2)

    def test_stats(self) -> None:
        self.cache.set("k", 1)
        self.cache.get("k")
        self.cache.get("missing")
        stats = self.cache.stats()
        self.assertEqual((stats.size, stats.hits, stats.misses), (1, 1, 1))
        self.assertEqual(stats.hit_rate, 0.5)
        self.assertEqual(stats.as_dict()["hitRate"], "50.0%")

    def test_clear(self) -> None:
        self.cache.set("k", 1)
        self.cache.get("k")
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
        self.assertEqual(self.cache.stats().hits, 0)

    def test_rejects_non_positive_ttl(self) -> None:
        with self.assertRaises(ValueError):
            SimilarityCache(0)

    def test_instances_do_not_share_entries(self) -> None:
        other = SimilarityCache(10, clock=self.clock)
        self.cache.set("k", 1)
        self.assertIsNone(other.get("k"))


class TestSweeper(unittest.TestCase):
    def test_background_sweeper_evicts_and_stops(self) -> None:
        cache = SimilarityCache(0.01)
        cache.set("k", 1)
        cache.start_sweeper(0.01)
        try:
            self.assertTrue(cache.sweeper_running)
            cache.start_sweeper(0.01)
            deadline = time.monotonic() + 2.0
            while len(cache) and time.monotonic() < deadline:
                time.sleep(0.01)
            self.assertEqual(len(cache), 0)
        finally:
            cache.close()
        self.assertFalse(cache.sweeper_running)

    def test_rejects_non_positive_interval(self) -> None:
        cache = SimilarityCache(1)
        with self.assertRaises(ValueError):
            cache.start_sweeper(0)


if __name__ == "__main__":
    unittest.main()
