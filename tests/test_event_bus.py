from tally.shared.core.event_bus import EventBus


async def test_publish_reaches_each_subscriber_once(recorder):
    bus = EventBus()
    await bus.subscribe("counter.updated", recorder)
    await bus.subscribe("counter.updated", recorder)

    assert await bus.publish("counter.updated", {"product_id": "p-1"}) == 1
    assert await bus.wait_until_idle()
    assert recorder.calls == [{"product_id": "p-1"}]


async def test_publish_without_subscribers():
    bus = EventBus()
    assert await bus.publish("nobody.home", {}) == 0
    assert not bus.has_subscribers("nobody.home")


async def test_failing_handler_does_not_stop_others(recorder):
    bus = EventBus()

    async def broken(payload):
        raise RuntimeError("listener crashed")

    await bus.subscribe("topic", broken)
    await bus.subscribe("topic", recorder)
    await bus.publish("topic", {"n": 1})
    assert await bus.wait_until_idle()
    assert recorder.calls == [{"n": 1}]


async def test_unsubscribe(recorder):
    bus = EventBus()
    await bus.subscribe("topic", recorder)
    await bus.unsubscribe("topic", recorder)
    await bus.publish("topic", {})
    assert await bus.wait_until_idle()
    assert recorder.calls == []
