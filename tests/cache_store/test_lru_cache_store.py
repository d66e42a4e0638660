"""
Tests for the in-memory LRU cache store.
"""
import random
import threading
from collections import OrderedDict

import pytest

from boundlru.cache_store import LRUCacheStore
from boundlru.exceptions import ConfigurationError, InvariantViolationError, ValidationError
from boundlru.utils.timeout import TimeoutError


@pytest.fixture
def store():
    """Provides an unbounded store with consistency checking enabled."""
    return LRUCacheStore(check_invariants=True)


def fill(store, count, fmt="content--{}"):
    for i in range(count):
        assert store.set(f"k{i}", fmt.format(i)) is True


# --- Basic operations ---

def test_new_store_is_empty(store):
    assert store.count() == 0
    assert store.size() == 0
    assert store.is_empty()
    assert len(store) == 0
    assert store.keys() == []


def test_get_missing_key_returns_default(store):
    assert store.get("boguskey") is None
    assert store.get("boguskey", b"fallback") == b"fallback"


def test_has_missing_key_returns_false(store):
    assert store.has("boguskey") is False
    assert "boguskey" not in store


def test_set_adds_new_entry_unlimited(store):
    content = "1234567890"
    assert store.set("fixedsizekey", content) is True

    assert store.count() == 1
    assert store.size() == 10
    assert store.has("fixedsizekey")
    assert store.get("fixedsizekey") == content


def test_size_tracks_sum_of_payloads(store):
    expected = 0
    for i in range(10):
        content = f"content--{i}"
        expected += len(content)
        assert store.set(f"key{i}", content)
        assert store.has(f"key{i}")
    assert store.size() == expected
    assert store.count() == 10


def test_set_replaces_existing(store):
    assert store.set("fixedsizekey", "oldgarbage")
    assert store.set("fixedsizekey", "0123456789")

    assert store.count() == 1
    assert store.size() == 10
    assert store.get("fixedsizekey") == "0123456789"


def test_replacement_updates_size_to_new_payload(store):
    store.set("k", b"12345")
    store.set("k", b"123")
    assert store.size() == 3
    store.set("k", b"1234567")
    assert store.size() == 7


def test_get_returns_stored_object_without_copy(store):
    payload = bytearray(b"abc")
    store.set("k", payload)
    assert store.get("k") is payload


def test_drop_missing_key_returns_false(store):
    store.set("present", "value")
    assert store.drop("boguskey") is False
    assert store.count() == 1
    assert store.size() == 5
    assert store.keys() == ["present"]


def test_drop_existing_key(store):
    store.set("fixedsizekey", "0123456789")
    assert store.drop("fixedsizekey") is True
    assert store.size() == 0
    assert store.count() == 0
    assert store.has("fixedsizekey") is False


def test_zero_length_payload_is_admitted():
    store = LRUCacheStore(size_limit=5, check_invariants=True)
    assert store.set("empty", b"") is True
    assert store.count() == 1
    assert store.size() == 0
    assert store.get("empty") == b""


def test_set_rejects_invalid_key(store):
    with pytest.raises(ValidationError):
        store.set("", "value")
    with pytest.raises(ValidationError):
        store.set(123, "value")
    assert store.count() == 0


def test_set_rejects_none_payload(store):
    with pytest.raises(ValidationError):
        store.set("k", None)
    assert store.count() == 0


def test_set_measures_structured_payloads(store):
    assert store.set("doc", {"a": 1})
    assert store.size() == len(b'{"a":1}')


# --- Scenarios ---

def test_count_limit_evicts_oldest():
    store = LRUCacheStore(count_limit=4, check_invariants=True)
    for i in range(5):
        assert store.set(f"k{i}", f"c{i}") is True

    assert store.count() == 4
    assert store.has("k0") is False
    for i in range(1, 5):
        assert store.has(f"k{i}")
        assert store.get(f"k{i}") == f"c{i}"


def test_size_limit_evicts_oldest():
    store = LRUCacheStore(size_limit=40, check_invariants=True)
    fill(store, 5)

    assert store.count() == 4
    assert store.size() == 40
    assert store.has("k0") is False
    for i in range(1, 5):
        assert store.get(f"k{i}") == f"content--{i}"


def test_combined_limits_oversized_insert_evicts_several():
    store = LRUCacheStore(size_limit=40, count_limit=4, check_invariants=True)
    fill(store, 5)

    assert store.set("k5", "12345678901234567890") is True

    assert store.count() == 3
    assert store.size() == 40
    for key in ("k0", "k1", "k2"):
        assert store.has(key) is False
    for key in ("k3", "k4", "k5"):
        assert store.has(key) is True
    assert store.get("k5") == "12345678901234567890"


def test_single_oversized_item_is_rejected():
    store = LRUCacheStore(size_limit=5, check_invariants=True)
    assert store.set("k", "1234567890") is False
    assert store.count() == 0
    assert store.size() == 0
    assert store.has("k") is False


def test_item_exactly_at_size_limit_is_admitted():
    store = LRUCacheStore(size_limit=5, check_invariants=True)
    assert store.set("k", "12345") is True
    assert store.count() == 1
    assert store.size() == 5
    assert store.get("k") == "12345"


def test_replacement_when_full_is_admitted():
    store = LRUCacheStore(size_limit=5, check_invariants=True)
    assert store.set("k", "12345") is True
    assert store.set("k", "54321") is True
    assert store.count() == 1
    assert store.size() == 5
    assert store.get("k") == "54321"


def test_get_bumps_entry_to_most_recent():
    store = LRUCacheStore(count_limit=3, check_invariants=True)
    for i in range(3):
        store.set(f"k{i}", f"c{i}")

    store.get("k0")
    store.set("k3", "c3")

    assert store.has("k0") is True
    assert store.has("k1") is False
    assert store.has("k2") is True
    assert store.has("k3") is True


# --- Recency ---

def test_keys_are_ordered_most_recent_first(store):
    fill(store, 3)
    assert store.keys() == ["k2", "k1", "k0"]
    store.get("k1")
    assert store.keys() == ["k1", "k2", "k0"]
    store.set("k0", "again")
    assert store.keys() == ["k0", "k1", "k2"]


def test_has_does_not_bump_recency():
    store = LRUCacheStore(count_limit=2, check_invariants=True)
    store.set("a", "1")
    store.set("b", "2")
    assert store.has("a")
    store.set("c", "3")
    assert store.has("a") is False
    assert store.keys() == ["c", "b"]


def test_get_miss_does_not_change_order(store):
    fill(store, 3)
    before = store.keys()
    assert store.get("nope") is None
    assert store.keys() == before


# --- Rejection and replacement accounting ---

def test_rejected_replacement_keeps_existing_entry():
    store = LRUCacheStore(size_limit=5, check_invariants=True)
    store.set("k", "12345")
    store.set("other", "")

    assert store.set("k", "123456") is False

    assert store.get("k") == "12345"
    assert store.count() == 2
    assert store.size() == 5


def test_rejection_leaves_recency_untouched():
    store = LRUCacheStore(size_limit=10, check_invariants=True)
    store.set("a", "1")
    store.set("b", "2")
    store.set("a", "x" * 11)
    assert store.keys() == ["b", "a"]


def test_replacement_within_headroom_evicts_nothing():
    store = LRUCacheStore(size_limit=30, count_limit=3, check_invariants=True)
    store.set("a", "1234567890")
    store.set("b", "12345")
    store.set("c", "1234567890")

    # 5 bytes of headroom: growing b by 5 fits without touching a or c
    assert store.set("b", "1234567890") is True

    assert store.keys() == ["b", "c", "a"]
    assert store.size() == 30
    assert store.get_metrics().evictions == 0


def test_replacement_of_lru_entry_at_count_limit_evicts_nothing():
    store = LRUCacheStore(count_limit=3, check_invariants=True)
    fill(store, 3)
    assert store.set("k0", "fresh") is True
    assert store.count() == 3
    assert store.keys() == ["k0", "k2", "k1"]


def test_growing_replacement_evicts_only_what_it_needs():
    store = LRUCacheStore(size_limit=30, check_invariants=True)
    store.set("a", "1234567890")
    store.set("b", "1234567890")
    store.set("c", "1234567890")

    # c grows by 10 bytes; a is the LRU entry that is not c
    assert store.set("c", "12345678901234567890") is True

    assert store.has("a") is False
    assert store.has("b") is True
    assert store.get("c") == "12345678901234567890"
    assert store.size() == 30


def test_replacing_lru_entry_skips_it_during_eviction():
    store = LRUCacheStore(size_limit=30, check_invariants=True)
    store.set("a", "1234567890")
    store.set("b", "1234567890")
    store.set("c", "1234567890")

    # a is LRU and is the key being replaced; b must go instead
    assert store.set("a", "12345678901234567890") is True

    assert store.has("b") is False
    assert store.keys() == ["a", "c"]
    assert store.size() == 30


def test_unbounded_store_never_evicts(store):
    fill(store, 500)
    assert store.count() == 500
    assert store.get_metrics().evictions == 0


# --- Limits ---

def test_set_limits_evicts_immediately():
    store = LRUCacheStore(check_invariants=True)
    fill(store, 5)

    evicted = store.set_limits(size_limit=0, count_limit=2)

    assert evicted == 3
    assert store.count() == 2
    assert store.keys() == ["k4", "k3"]


def test_set_limits_honours_both_dimensions():
    store = LRUCacheStore(check_invariants=True)
    fill(store, 5)
    store.get("k0")

    evicted = store.set_limits(size_limit=25, count_limit=4)

    assert evicted == 3
    assert store.keys() == ["k0", "k4"]
    assert store.size() == 20


def test_set_limits_loosening_evicts_nothing():
    store = LRUCacheStore(count_limit=3, check_invariants=True)
    fill(store, 3)
    assert store.set_limits(size_limit=0, count_limit=0) == 0
    fill(store, 10)
    assert store.count() == 10


def test_set_limits_rejects_invalid_values(store):
    with pytest.raises(ValidationError):
        store.set_limits(size_limit=-1)
    with pytest.raises(ValidationError):
        store.set_limits(count_limit="4")
    assert store.get_limits().size_limit == 0


def test_get_limits_reflects_policy():
    store = LRUCacheStore(size_limit=10, count_limit=2)
    limits = store.get_limits()
    assert limits.size_limit == 10
    assert limits.count_limit == 2


def test_constructor_rejects_negative_limits():
    with pytest.raises(ValidationError):
        LRUCacheStore(count_limit=-5)


def test_constructor_rejects_bad_lock_timeout():
    with pytest.raises(ValidationError):
        LRUCacheStore(lock_timeout=0)


# --- Batch operations ---

def test_has_all(store):
    store.set("key1", "value1")
    store.set("key2", "value2")
    assert store.has_all(["key1", "key2"]) is True
    assert store.has_all(["key1", "key3"]) is False
    assert store.has_all([]) is True


def test_drop_all_counts_dropped_keys(store):
    store.set("key1", "value1")
    assert store.drop_all(["key1", "key2"]) == 1

    store.set("key1", "value1")
    store.set("key2", "value2")
    assert store.drop_all(["key1", "key2"]) == 2
    assert store.is_empty()


def test_drop_all_rejects_bare_string(store):
    with pytest.raises(ValidationError):
        store.drop_all("key1")
    with pytest.raises(ValidationError):
        store.has_all("key1")


def test_drop_all_treats_invalid_keys_as_absent(store):
    store.set("a", "1")
    store.set("b", "2")
    assert store.drop("") is False
    assert store.drop_all(["a", ""]) == 1
    assert store.keys() == ["b"]
    assert store.has_all(["b", ""]) is False


def test_long_keys_are_accepted(store):
    key = "k" * 251
    assert store.set(key, "v") is True
    assert store.get(key) == "v"
    assert store.drop_all([key, "k" * 1000]) == 1
    assert store.is_empty()


def test_flush_drops_everything_but_keeps_limits():
    store = LRUCacheStore(count_limit=3, check_invariants=True)
    store.set("key1", "value1")
    store.set("key2", "value2")

    store.flush()

    assert store.is_empty()
    assert store.size() == 0
    assert store.count() == 0
    assert store.get_limits().count_limit == 3


# --- Configuration ---

def test_from_config_mapping_with_original_key_names():
    store = LRUCacheStore.from_config({"totalCountLimit": "5", "totalSizeLimit": 100})
    limits = store.get_limits()
    assert limits.count_limit == 5
    assert limits.size_limit == 100


def test_from_config_invalid_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        LRUCacheStore.from_config({"total_count_limit": -1})


def test_configure_only_changes_given_limits():
    store = LRUCacheStore(size_limit=100, count_limit=10)
    store.configure({"total_count_limit": 4})
    limits = store.get_limits()
    assert limits.count_limit == 4
    assert limits.size_limit == 100


def test_configure_evicts_to_new_limits():
    store = LRUCacheStore(check_invariants=True)
    fill(store, 6)
    assert store.configure({"totalCountLimit": 5}) == 1
    assert store.has("k0") is False


# --- Metrics ---

def test_metrics_track_activity():
    store = LRUCacheStore(size_limit=20)
    store.set("a", "1234567890")
    store.set("b", "1234567890")
    store.set("c", "1234567890")   # evicts a
    store.set("c", "12345")        # replacement
    store.set("huge", "x" * 21)    # rejected
    store.get("b")
    store.get("a")
    store.drop("b")

    metrics = store.get_metrics()
    assert metrics.sets == 4
    assert metrics.evictions == 1
    assert metrics.replacements == 1
    assert metrics.rejections == 1
    assert metrics.hits == 1
    assert metrics.misses == 1
    assert metrics.drops == 1
    assert metrics.hit_rate == 0.5
    assert metrics.current_count == 1
    assert metrics.current_size == 5


def test_metrics_snapshot_is_detached(store):
    snapshot = store.get_metrics()
    store.set("a", "1")
    assert snapshot.sets == 0
    assert store.get_metrics().sets == 1


def test_get_stats_includes_store_details():
    store = LRUCacheStore(count_limit=2, name="sessions")
    store.set("a", "1")
    stats = store.get_stats()
    assert stats["name"] == "sessions"
    assert stats["store"] == "LRUCacheStore"
    assert stats["count_limit"] == 2
    assert stats["current_count"] == 1
    assert "hit_rate" in stats


def test_eviction_is_logged(caplog):
    caplog.set_level("DEBUG", logger="boundlru.cache_store.stores.in_memory")
    store = LRUCacheStore(count_limit=1, name="logged")
    store.set("a", "1")
    store.set("b", "2")

    events = [getattr(r, "extra_fields", {}) for r in caplog.records]
    evictions = [e for e in events if e.get("event_type") == "cache_eviction"]
    assert evictions == [
        {"event_type": "cache_eviction", "cache_name": "logged", "cache_key": "a", "entry_size": 1}
    ]


def test_limit_change_is_logged_with_deferred_arguments(caplog):
    caplog.set_level("INFO", logger="boundlru.cache_store.stores.in_memory")
    store = LRUCacheStore(name="limits")
    fill(store, 3)
    store.set_limits(count_limit=1)

    record = next(r for r in caplog.records if "limits set to" in r.msg)
    assert record.args == ("limits", 0, 1, 2)
    assert record.getMessage() == "Cache 'limits' limits set to size=0 count=1; evicted 2 entries"


# --- Invariant checking ---

def test_verify_invariants_detects_corrupted_counters(store):
    fill(store, 3)
    store._size += 1
    with pytest.raises(InvariantViolationError, match="sum of entry sizes"):
        store.verify_invariants()


def test_check_invariants_fails_fast_on_mutation(store):
    fill(store, 2)
    store._count += 1
    with pytest.raises(InvariantViolationError):
        store.set("k9", "boom")


def test_verify_invariants_detects_dangling_index_entry(store):
    fill(store, 2)
    node = store._index["k0"]
    store._recency.remove(node)
    store._recency.push_front(node.entry)
    with pytest.raises(InvariantViolationError):
        store.verify_invariants()


# --- Property-style checks ---

class ReferenceLRU:
    """Straightforward model of the admission/eviction rules."""

    def __init__(self, size_limit, count_limit):
        self.size_limit = size_limit
        self.count_limit = count_limit
        self.items = OrderedDict()  # LRU first

    def total(self):
        return sum(len(v) for v in self.items.values())

    def fits(self, key, new_size):
        replace = key in self.items
        count = len(self.items) + 1 - (1 if replace else 0)
        size = self.total() + new_size - (len(self.items[key]) if replace else 0)
        if self.count_limit and count > self.count_limit:
            return False
        if self.size_limit and size > self.size_limit:
            return False
        return True

    def set(self, key, value):
        if self.size_limit and len(value) > self.size_limit:
            return False
        while not self.fits(key, len(value)):
            victim = next(k for k in self.items if k != key)
            del self.items[victim]
        self.items.pop(key, None)
        self.items[key] = value
        return True

    def get(self, key):
        if key not in self.items:
            return None
        self.items.move_to_end(key)
        return self.items[key]

    def drop(self, key):
        return self.items.pop(key, None) is not None

    def keys(self):
        return list(reversed(self.items))


@pytest.mark.parametrize("size_limit,count_limit", [(0, 0), (0, 5), (60, 0), (60, 5), (25, 8)])
def test_random_operations_match_reference_model(size_limit, count_limit):
    rng = random.Random(size_limit * 31 + count_limit)
    store = LRUCacheStore(size_limit=size_limit, count_limit=count_limit, check_invariants=True)
    model = ReferenceLRU(size_limit, count_limit)
    keys = [f"k{i}" for i in range(12)]

    for _ in range(600):
        op = rng.random()
        key = rng.choice(keys)
        if op < 0.5:
            value = "v" * rng.randint(0, 30)
            before = store.get_metrics().evictions
            admitted = store.set(key, value)
            assert admitted == model.set(key, value)
            if admitted:
                assert store.keys()[0] == key
                assert store.get(key) == value
                model.get(key)
            else:
                assert store.get_metrics().evictions == before
        elif op < 0.8:
            result = store.get(key)
            assert result == model.get(key)
            if result is not None:
                assert store.keys()[0] == key
        elif op < 0.9:
            assert store.has(key) == (key in model.items)
        else:
            assert store.drop(key) == model.drop(key)

        assert store.keys() == model.keys()
        assert store.count() == len(model.items)
        assert store.size() == model.total()
        if count_limit:
            assert store.count() <= count_limit
        if size_limit:
            assert store.size() <= size_limit


# --- Concurrency ---

def test_concurrent_writers_keep_store_consistent():
    store = LRUCacheStore(size_limit=500, count_limit=50)
    errors = []

    def worker(worker_id):
        rng = random.Random(worker_id)
        try:
            for i in range(500):
                key = f"w{worker_id}-{rng.randint(0, 80)}"
                action = rng.random()
                if action < 0.6:
                    store.set(key, "x" * rng.randint(1, 20))
                elif action < 0.9:
                    store.get(key)
                else:
                    store.drop(key)
        except Exception as e:  # pragma: no cover - surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    store.verify_invariants()
    assert store.count() <= 50
    assert store.size() <= 500


def test_lock_timeout_raises_when_store_is_busy():
    store = LRUCacheStore(lock_timeout=0.05)
    acquired = threading.Event()
    release = threading.Event()

    def holder():
        with store._lock:
            acquired.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    assert acquired.wait(5)
    try:
        with pytest.raises(TimeoutError, match="lock not acquired"):
            store.set("k", "v")
    finally:
        release.set()
        thread.join()

    assert store.count() == 0
    assert store.set("k", "v") is True
