import threading

from upstate.core.store import DerivedStore, WritableStore, derive, writable


def test_subscribe_delivers_current_value_immediately():
    store = writable(1)
    received = []
    store.subscribe(received.append)
    assert received == [1]


def test_late_subscriber_sees_latest_value_before_next_set():
    store = writable("a")
    store.set("b")
    received = []
    store.subscribe(received.append)
    store.set("c")
    assert received == ["b", "c"]


def test_set_notifies_in_registration_order_every_time():
    store = writable(0)
    calls = []
    store.subscribe(lambda v: calls.append(("first", v)))
    store.subscribe(lambda v: calls.append(("second", v)))
    calls.clear()

    store.set(1)
    store.set(1)
    assert calls == [("first", 1), ("second", 1), ("first", 1), ("second", 1)]


def test_set_without_subscribers_only_replaces_value():
    store = writable([1])
    store.set([2])
    assert store.get() == [2]


def test_update_applies_function_to_current_value():
    store = writable(10)
    store.update(lambda v: v + 5)
    store.update(lambda v: v * 2)
    assert store.get() == 30


def test_unsubscribe_stops_delivery_and_is_idempotent():
    store = writable(0)
    received = []
    unsubscribe = store.subscribe(received.append)
    unsubscribe()
    unsubscribe()
    store.set(1)
    assert received == [0]


def test_same_callback_subscribed_twice_is_two_registrations():
    store = writable(0)
    received = []
    first = store.subscribe(received.append)
    store.subscribe(received.append)
    first()
    received.clear()
    store.set(5)
    assert received == [5]


def test_failing_subscriber_does_not_block_others():
    store = writable(0)
    received = []

    def broken(value):
        if value:
            raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(received.append)
    store.set(7)
    assert received == [0, 7]
    assert store.get() == 7


def test_reentrant_set_is_delivered_after_current_round():
    store = writable(0)
    seen_a, seen_b = [], []

    def bump(value):
        seen_a.append(value)
        if value == 1:
            store.set(2)

    store.subscribe(bump)
    store.subscribe(seen_b.append)
    store.set(1)

    assert seen_a == [0, 1, 2]
    assert seen_b == [0, 1, 2]
    assert store.get() == 2


def test_derived_get_is_fresh_without_subscribers():
    source = writable(2)
    doubled = derive(source, lambda v: v * 2)
    source.set(4)
    assert doubled.get() == 8


def test_derived_renotifies_after_source():
    source = writable(1)
    squared = derive(source, lambda v: v * v)
    order = []
    source.subscribe(lambda v: order.append(("source", v)))
    squared.subscribe(lambda v: order.append(("derived", v)))
    order.clear()

    source.set(3)
    assert order == [("source", 3), ("derived", 9)]


def test_derived_from_several_sources():
    left = writable(1)
    right = writable(10)
    total = derive((left, right), lambda a, b: a + b)
    received = []
    total.subscribe(received.append)
    left.set(2)
    right.set(20)
    assert received == [11, 12, 22]


def test_derived_releases_source_when_last_subscriber_leaves():
    source = writable(0)
    calls = []
    view = derive(source, lambda v: calls.append(v) or v)
    unsubscribe = view.subscribe(lambda v: None)
    unsubscribe()
    calls.clear()

    source.set(1)
    assert calls == []


def test_readonly_view_has_no_write_capability():
    store = WritableStore("x")
    view = store.readonly()
    assert isinstance(view, DerivedStore)
    assert not hasattr(view, "set")
    assert not hasattr(view, "update")

    received = []
    view.subscribe(received.append)
    store.set("y")
    assert received == ["x", "y"]
    assert view.get() == "y"


def test_derived_attaches_upstream_once_under_concurrent_subscribers():
    source = writable(0)
    view = derive(source, lambda v: v + 1)
    start = threading.Barrier(8)
    handles = []

    def subscribe():
        start.wait()
        handles.append(view.subscribe(lambda v: None))

    threads = [threading.Thread(target=subscribe) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(handles) == 8
    assert len(source._fanout) == 1

    for unsubscribe in handles:
        unsubscribe()
    assert len(source._fanout) == 0
