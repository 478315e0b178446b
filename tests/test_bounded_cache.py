import threading

from ordertracker.core.cache import BoundedCache


def test_get_unknown_key_returns_none():
    cache: BoundedCache[int, str] = BoundedCache("items")
    assert cache.get(1) is None
    assert 1 not in cache


def test_put_then_get_until_evicted():
    cache: BoundedCache[int, str] = BoundedCache()
    cache.put(1, "a")
    assert cache.get(1) == "a"
    assert cache.get(1) == "a"

    cache.evict(1)
    assert cache.get(1) is None


def test_put_overwrites_previous_value():
    cache: BoundedCache[int, str] = BoundedCache()
    cache.put(1, "a")
    cache.put(1, "b")
    assert cache.get(1) == "b"
    assert len(cache) == 1


def test_evict_is_idempotent():
    cache: BoundedCache[int, str] = BoundedCache()
    cache.evict(42)
    cache.put(42, "x")
    cache.evict(42)
    cache.evict(42)
    assert len(cache) == 0


def test_pop_returns_removed_value():
    cache: BoundedCache[int, str] = BoundedCache()
    cache.put(3, "c")
    assert cache.pop(3) == "c"
    assert cache.pop(3) is None


def test_clear_removes_everything():
    cache: BoundedCache[int, int] = BoundedCache()
    for key in range(10):
        cache.put(key, key * key)

    assert cache.clear() == 10
    assert all(cache.get(key) is None for key in range(10))
    assert cache.keys() == []


def test_concurrent_puts_lose_nothing():
    cache: BoundedCache[int, int] = BoundedCache()

    def writer(offset: int) -> None:
        for i in range(500):
            cache.put(offset * 1000 + i, i)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 8 * 500
