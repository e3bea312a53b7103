import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor

from bizsuite.services.query.client import Mutation, QueryClient, QueryObserver
from bizsuite.services.query.keys import QueryKeys


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _Counter:
    def __init__(self, value="v"):
        self.calls = 0
        self.value = value

    def __call__(self):
        self.calls += 1
        return f"{self.value}{self.calls}"


KEYS = QueryKeys("employees")


class TestQueryClientUnit(unittest.TestCase):
    def setUp(self):
        self.clock = _Clock()
        self.client = QueryClient(clock=self.clock)

    def test_fresh_data_is_served_from_cache(self):
        fn = _Counter()
        self.assertEqual(self.client.fetch_query(KEYS.detail("1"), fn, stale_time_s=60), "v1")
        self.clock.advance(30)
        self.assertEqual(self.client.fetch_query(KEYS.detail("1"), fn, stale_time_s=60), "v1")
        self.assertEqual(fn.calls, 1)
        self.clock.advance(31)
        self.assertEqual(self.client.fetch_query(KEYS.detail("1"), fn, stale_time_s=60), "v2")

    def test_concurrent_reads_of_one_key_share_one_fetch(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow():
            calls.append(1)
            started.set()
            release.wait(5)
            return "shared"

        with ThreadPoolExecutor(max_workers=4) as pool:
            first = pool.submit(self.client.fetch_query, KEYS.detail("1"), slow)
            self.assertTrue(started.wait(5))
            others = [pool.submit(self.client.fetch_query, KEYS.detail("1"), slow) for _ in range(3)]
            time.sleep(0.05)
            self.assertEqual(self.client.is_fetching(KEYS.all), 1)
            release.set()
            results = [first.result(5)] + [f.result(5) for f in others]

        self.assertEqual(results, ["shared"] * 4)
        self.assertEqual(len(calls), 1)
        self.assertEqual(self.client.is_fetching(), 0)

    def test_waiters_receive_the_fetch_error(self):
        started = threading.Event()
        release = threading.Event()

        def failing():
            started.set()
            release.wait(5)
            raise RuntimeError("backend down")

        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(self.client.fetch_query, KEYS.lists(), failing)
            self.assertTrue(started.wait(5))
            second = pool.submit(self.client.fetch_query, KEYS.lists(), failing)
            time.sleep(0.05)
            release.set()
            with self.assertRaises(RuntimeError):
                first.result(5)
            with self.assertRaises(RuntimeError):
                second.result(5)

        state = self.client.get_query_state(KEYS.lists())
        self.assertEqual(state.status, "error")
        self.assertIsNone(state.data)

    def test_invalidate_all_marks_every_derived_key(self):
        for key in (KEYS.list(), KEYS.paged({"pageNumber": 1}), KEYS.detail("1")):
            self.client.set_query_data(key, "x")
        other = QueryKeys("products").detail("1")
        self.client.set_query_data(other, "y")

        matched = self.client.invalidate_queries(KEYS.all)

        self.assertEqual(len(matched), 3)
        for key in matched:
            self.assertTrue(self.client.get_query_state(key).is_invalidated)
            self.assertTrue(self.client.is_stale(key, stale_time_s=3600))
        self.assertFalse(self.client.get_query_state(other).is_invalidated)

    def test_invalidate_lists_leaves_details_fresh(self):
        self.client.set_query_data(KEYS.list(), "list")
        self.client.set_query_data(KEYS.detail("1"), "detail")
        self.client.invalidate_queries(KEYS.lists())
        self.assertTrue(self.client.is_stale(KEYS.list(), 3600))
        self.assertFalse(self.client.is_stale(KEYS.detail("1"), 3600))

    def test_invalidated_entry_refetches_on_next_read(self):
        fn = _Counter()
        self.client.fetch_query(KEYS.detail("1"), fn, stale_time_s=300)
        self.client.invalidate_queries(KEYS.details())
        self.assertEqual(self.client.fetch_query(KEYS.detail("1"), fn, stale_time_s=300), "v2")
        self.assertFalse(self.client.get_query_state(KEYS.detail("1")).is_invalidated)

    def test_remove_queries_drops_subtree(self):
        self.client.set_query_data(KEYS.detail("1"), "a")
        self.client.set_query_data(KEYS.detail("2"), "b")
        self.client.remove_queries(KEYS.detail("1"))
        self.assertIsNone(self.client.get_query_state(KEYS.detail("1")))
        self.assertEqual(self.client.get_query_data(KEYS.detail("2")), "b")

    def test_fetch_finishing_after_removal_is_not_cached(self):
        started = threading.Event()
        release = threading.Event()

        def slow():
            started.set()
            release.wait(5)
            return {"id": "1", "name": "deleted"}

        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(self.client.fetch_query, KEYS.detail("1"), slow)
            self.assertTrue(started.wait(5))
            self.client.remove_queries(KEYS.detail("1"))
            release.set()
            self.assertEqual(pending.result(5), {"id": "1", "name": "deleted"})

        self.assertIsNone(self.client.get_query_state(KEYS.detail("1")))
        self.assertEqual(self.client.fetch_query(KEYS.detail("1"), lambda: "refetched", stale_time_s=300), "refetched")

    def test_listeners_receive_events(self):
        events = []
        unsubscribe = self.client.subscribe(lambda event, key: events.append((event, key)))
        self.client.set_query_data(KEYS.detail("1"), "a")
        self.client.invalidate_queries(KEYS.all)
        self.client.remove_queries(KEYS.all)
        unsubscribe()
        self.client.set_query_data(KEYS.detail("2"), "b")
        self.assertEqual(
            events,
            [("updated", KEYS.detail("1")), ("invalidated", KEYS.detail("1")), ("removed", KEYS.detail("1"))],
        )

    def test_collect_garbage_keeps_observed_entries(self):
        self.client.set_query_data(KEYS.detail("1"), "unobserved")
        observer = QueryObserver(self.client, KEYS.detail("2"), lambda: "observed")
        observer.fetch()
        self.clock.advance(self.client.gc_time_s + 1)

        removed = self.client.collect_garbage()

        self.assertEqual(removed, [KEYS.detail("1")])
        self.assertEqual(self.client.get_query_data(KEYS.detail("2")), "observed")
        observer.destroy()
        self.clock.advance(self.client.gc_time_s + 1)
        self.assertEqual(self.client.collect_garbage(), [KEYS.detail("2")])

    def test_clear(self):
        self.client.set_query_data(KEYS.detail("1"), "a")
        self.client.clear()
        self.assertEqual(self.client.keys(), [])


class TestQueryObserverUnit(unittest.TestCase):
    def setUp(self):
        self.clock = _Clock()
        self.client = QueryClient(clock=self.clock)

    def test_errors_are_reported_not_raised(self):
        def boom():
            raise ValueError("bad")

        observer = QueryObserver(self.client, KEYS.detail("x"), boom)
        result = observer.fetch()
        self.assertTrue(result.is_error)
        self.assertIsInstance(result.error, ValueError)
        self.assertIsNone(result.data)

    def test_disabled_observer_does_not_fetch(self):
        fn = _Counter()
        observer = QueryObserver(self.client, KEYS.detail(""), fn, enabled=False)
        result = observer.fetch()
        self.assertEqual(fn.calls, 0)
        self.assertTrue(result.is_pending)

    def test_keep_previous_data_shows_placeholder_until_new_key_loads(self):
        observer = QueryObserver(
            self.client, KEYS.paged({"pageNumber": 1}), lambda: "page-1", keep_previous_data=True, stale_time_s=30
        )
        self.assertEqual(observer.fetch().data, "page-1")

        observer.set_options(key=KEYS.paged({"pageNumber": 2}), fn=lambda: "page-2")
        placeholder = observer.get_result()
        self.assertEqual(placeholder.data, "page-1")
        self.assertTrue(placeholder.is_placeholder_data)

        loaded = observer.fetch()
        self.assertEqual(loaded.data, "page-2")
        self.assertFalse(loaded.is_placeholder_data)

    def test_without_keep_previous_data_new_key_is_pending(self):
        observer = QueryObserver(self.client, KEYS.detail("1"), lambda: "one")
        observer.fetch()
        observer.set_options(key=KEYS.detail("2"), fn=lambda: "two")
        result = observer.get_result()
        self.assertIsNone(result.data)
        self.assertTrue(result.is_pending)

    def test_destroy_caches_late_result_but_skips_listeners(self):
        started = threading.Event()
        release = threading.Event()

        def slow():
            started.set()
            release.wait(5)
            return "late"

        seen = []
        observer = QueryObserver(self.client, KEYS.detail("1"), slow)
        observer.subscribe(seen.append)
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = observer.fetch_in_background(pool)
            self.assertTrue(started.wait(5))
            observer.destroy()
            release.set()
            future.result(5)

        self.assertEqual(seen, [])
        self.assertEqual(self.client.get_query_data(KEYS.detail("1")), "late")

    def test_listeners_get_results(self):
        seen = []
        observer = QueryObserver(self.client, KEYS.detail("1"), lambda: "one")
        unsubscribe = observer.subscribe(seen.append)
        observer.fetch()
        unsubscribe()
        observer.refetch()
        self.assertEqual([r.data for r in seen], ["one"])

    def test_is_stale_follows_stale_time(self):
        observer = QueryObserver(self.client, KEYS.detail("1"), lambda: "one", stale_time_s=300)
        self.assertFalse(observer.fetch().is_stale)
        self.clock.advance(301)
        self.assertTrue(observer.get_result().is_stale)


class TestMutationUnit(unittest.TestCase):
    def test_success_runs_side_effect(self):
        effects = []
        mutation = Mutation(lambda v: v * 2, label="double number", on_success=lambda r, v: effects.append((r, v)))
        self.assertEqual(mutation.mutate(4), 8)
        self.assertEqual(mutation.status, "success")
        self.assertEqual(effects, [(8, 4)])

    def test_failure_logs_records_and_reraises(self):
        effects = []

        def fail(_):
            raise RuntimeError("nope")

        mutation = Mutation(fail, label="create employee", on_success=lambda r, v: effects.append(r))
        with self.assertLogs("bizsuite.services.query.client", level="ERROR") as logs:
            with self.assertRaises(RuntimeError):
                mutation.mutate({"name": "x"})
        self.assertIn("Failed to create employee: nope", logs.output[0])
        self.assertEqual(mutation.status, "error")
        self.assertIsInstance(mutation.error, RuntimeError)
        self.assertEqual(effects, [])
        mutation.reset()
        self.assertEqual(mutation.status, "idle")


if __name__ == "__main__":
    unittest.main()
