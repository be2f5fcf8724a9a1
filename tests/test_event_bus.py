import time
from dataclasses import dataclass

from imagelink.events import CacheClearedEvent, ImageLoadedEvent
from imagelink.events.bus import Event, EventBus


@dataclass(kw_only=True)
class SimpleEvent(Event):
    payload: str = ""


def test_sync_subscribe_publish():
    bus = EventBus()
    received = []

    bus.subscribe(SimpleEvent, lambda e: received.append(e.payload))
    bus.publish(SimpleEvent(payload="hello"))

    assert received == ["hello"]


def test_async_subscribe_publish():
    bus = EventBus()
    received = []

    def handler(event: SimpleEvent):
        time.sleep(0.05)
        received.append(event.payload)

    bus.subscribe(SimpleEvent, handler, async_=True)
    bus.publish(SimpleEvent(payload="world"))
    bus.shutdown()

    assert received == ["world"]


def test_base_class_subscribers_see_subclasses():
    bus = EventBus()
    seen = []
    bus.subscribe(Event, lambda e: seen.append(type(e).__name__))

    bus.publish(ImageLoadedEvent(url="u", key="k", tier="disk"))
    bus.publish(CacheClearedEvent(cache_root="/tmp/c"))

    assert seen == ["ImageLoadedEvent", "CacheClearedEvent"]


def test_unsubscribe():
    bus = EventBus()
    received = []
    sub = bus.subscribe(SimpleEvent, received.append)

    bus.unsubscribe(sub)
    bus.publish(SimpleEvent())

    assert received == []
    assert not sub.active


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    received = []

    def broken(_event):
        raise RuntimeError("boom")

    bus.subscribe(SimpleEvent, broken)
    bus.subscribe(SimpleEvent, lambda e: received.append(e.payload))
    bus.publish(SimpleEvent(payload="still delivered"))

    assert received == ["still delivered"]

