from __future__ import annotations

from finsync.events import InvalidationBus, InvalidationEvent


def test_publish_reaches_every_listener_in_order() -> None:
    bus = InvalidationBus()
    received: list[tuple[str, str]] = []
    bus.subscribe(lambda event: received.append(("first", event.reason)))
    bus.subscribe(lambda event: received.append(("second", event.reason)))

    bus.publish(InvalidationEvent(reason="expired", method="GET", path="/users/stats/u1"))

    assert received == [("first", "expired"), ("second", "expired")]


def test_unsubscribe_stops_delivery() -> None:
    bus = InvalidationBus()
    received: list[InvalidationEvent] = []
    unsubscribe = bus.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    bus.publish(InvalidationEvent(reason="expired"))

    assert received == []
    assert len(bus) == 0


def test_failing_listener_does_not_block_others() -> None:
    bus = InvalidationBus()
    received: list[InvalidationEvent] = []

    def _broken(event: InvalidationEvent) -> None:
        raise RuntimeError("boom")

    bus.subscribe(_broken)
    bus.subscribe(received.append)

    bus.publish(InvalidationEvent(reason="expired"))

    assert len(received) == 1
