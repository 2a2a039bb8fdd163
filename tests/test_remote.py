"""Validate remote collection state and the concurrent fan-out helper."""

import threading

from shop_console.exceptions import ApiError, TransportError
from shop_console.remote import LoadStatus, RemoteCollection, fan_out, filter_items


class TestRemoteCollection:
    """LOADING moves to LOADED or ERROR on every load."""

    def test_initial_state_is_loading(self):
        collection = RemoteCollection()

        assert collection.is_loading
        assert collection.data == []
        assert collection.error is None

    def test_successful_load(self):
        collection = RemoteCollection().load(lambda: [1, 2, 3], "Failed")

        assert collection.status is LoadStatus.LOADED
        assert collection.data == [1, 2, 3]

    def test_failed_load_keeps_previous_data(self):
        collection = RemoteCollection().load(lambda: ["a"], "Failed")

        def boom():
            raise TransportError("down")

        collection.load(boom, "Failed to load shops")

        assert collection.status is LoadStatus.ERROR
        assert collection.error == "Failed to load shops"
        assert collection.data == ["a"]

    def test_reload_clears_error(self):
        collection = RemoteCollection(status=LoadStatus.ERROR, error="Failed")

        collection.load(lambda: [], "Failed")

        assert collection.is_loaded
        assert collection.error is None


class TestFilterItems:
    def test_blank_query_returns_everything_in_order(self):
        items = ["b", "a", "c"]

        assert filter_items(items, "", lambda item, needle: False) == ["b", "a", "c"]
        assert filter_items(items, "   ", lambda item, needle: False) == ["b", "a", "c"]

    def test_predicate_gets_lowered_needle(self):
        seen = []

        filter_items(["x"], "MiLk", lambda item, needle: seen.append(needle))

        assert seen == ["milk"]

    def test_order_preserved(self):
        items = ["apple", "banana", "apricot", "cherry"]

        assert filter_items(items, "ap", lambda item, needle: needle in item) == ["apple", "apricot"]


class TestFanOut:
    """Every key is fetched; failed branches fall back to the default."""

    def test_results_keyed_by_input(self):
        results = fan_out([1, 2, 3], lambda k: k * 10, default=int)

        assert results == {1: 10, 2: 20, 3: 30}

    def test_failed_branch_gets_default(self):
        def fetch(key):
            if key == 3:
                raise ApiError("Request failed", status_code=500)
            return [key]

        results = fan_out([1, 2, 3], fetch, default=list)

        assert results == {1: [1], 2: [2], 3: []}

    def test_empty_keys(self):
        assert fan_out([], lambda k: k, default=int) == {}

    def test_initializer_runs_in_workers(self):
        initialized = []
        lock = threading.Lock()

        def init():
            with lock:
                initialized.append(threading.current_thread().name)

        fan_out([1, 2], lambda k: k, default=int, max_workers=2, initializer=init)

        assert initialized
