"""Notifier — ordered synchronous fan-out."""

from schoolpay.services.notifier import Notifier


def test_publish_reaches_listeners_in_order():
    feed = Notifier("test")
    seen = []
    feed.subscribe(lambda v: seen.append(("a", v)))
    feed.subscribe(lambda v: seen.append(("b", v)))

    feed.publish(1)
    feed.publish(2)

    assert seen == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]


def test_unsubscribe_is_idempotent():
    feed = Notifier("test")
    seen = []
    unsubscribe = feed.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    feed.publish("x")
    assert seen == []
    assert feed.subscriber_count == 0


def test_failing_listener_does_not_block_others():
    feed = Notifier("test")
    seen = []

    def broken(_):
        raise ValueError("listener bug")

    feed.subscribe(broken)
    feed.subscribe(seen.append)
    feed.publish(42)

    assert seen == [42]
