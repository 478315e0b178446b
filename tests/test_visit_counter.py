import threading

from ordertracker.services import VisitCounter


def test_counts_per_url():
    counter = VisitCounter()
    counter.increment("/api/meals")
    counter.increment("/api/meals")
    counter.increment("/api/orders")

    assert counter.get_count("/api/meals") == 2
    assert counter.get_count("/api/unknown") == 0
    assert counter.all_counts() == {"/api/meals": 2, "/api/orders": 1}
    assert counter.most_visited() == ("/api/meals", 2)


def test_most_visited_on_empty_counter():
    assert VisitCounter().most_visited() is None


def test_concurrent_increments_are_not_lost():
    counter = VisitCounter()

    def hit() -> None:
        for _ in range(1000):
            counter.increment("/health")

    threads = [threading.Thread(target=hit) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter.get_count("/health") == 10_000
