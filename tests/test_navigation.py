import pytest

from tally.host.channel import WidgetChannelClient
from tally.host.navigation import DeliveryState, NavigationBridge, NavigationInbox
from tally.shared.core import events
from tally.shared.core.errors import MethodNotImplemented
from tally.shared.domain.models import ACTION_INCREASE, ACTION_OPEN_PRODUCT, NavigationRequest
from tally.shared.infrastructure.platform import Intent, IntentFlag


async def settle(bus):
    assert await bus.wait_until_idle()


def test_open_intent_shape():
    intent = NavigationBridge.build_intent("p-9")
    assert intent.action == ACTION_OPEN_PRODUCT
    assert intent.product_id == "p-9"
    assert intent.flags == IntentFlag.ACTIVITY_NEW_TASK | IntentFlag.ACTIVITY_CLEAR_TOP


def test_inbox_keeps_only_latest():
    inbox = NavigationInbox()
    first = NavigationRequest(product_id="a")
    second = NavigationRequest(product_id="b")
    assert inbox.offer(first) is None
    assert inbox.offer(second) == first
    assert inbox.drain() == second
    assert inbox.drain() is None


async def test_warm_path_delivers_once(app_host, bus, recorder):
    await app_host.launch(Intent(action="android.intent.action.MAIN"))
    await app_host.attach_listener(recorder)

    await NavigationBridge(app_host).open("p-1")
    await settle(bus)

    assert recorder.calls == [{"action": "ACTION_OPEN_PRODUCT", "product_id": "p-1"}]
    assert app_host.inbox.pending is None


async def test_cold_path_buffers_until_listener_attaches(app_host, bus, recorder):
    await NavigationBridge(app_host).open("p-2")
    await settle(bus)
    assert app_host.created
    assert recorder.calls == []

    await app_host.attach_listener(recorder)
    await settle(bus)
    assert recorder.calls == [{"action": "ACTION_OPEN_PRODUCT", "product_id": "p-2"}]

    await app_host.detach_listener()
    await app_host.attach_listener(recorder)
    await settle(bus)
    assert len(recorder.calls) == 1


async def test_newer_request_replaces_buffered_one(app_host, bus, recorder):
    bridge = NavigationBridge(app_host)
    await bridge.open("first")
    await bridge.open("second")

    await app_host.attach_listener(recorder)
    await settle(bus)

    assert recorder.calls == [{"action": "ACTION_OPEN_PRODUCT", "product_id": "second"}]
    assert app_host.deliveries(DeliveryState.DISCARDED) == [NavigationRequest(product_id="first")]
    assert app_host.deliveries(DeliveryState.DELIVERED) == [NavigationRequest(product_id="second")]


async def test_discard_is_announced_on_bus(app_host, bus, recorder):
    await bus.subscribe(events.TOPIC_NAVIGATION_DISCARDED, recorder)
    bridge = NavigationBridge(app_host)
    await bridge.open("first")
    await bridge.open("second")
    await settle(bus)
    assert recorder.calls == [
        {"action": "ACTION_OPEN_PRODUCT", "product_id": "first", "reason": "superseded"}
    ]


async def test_backgrounded_app_buffers_again(app_host, bus, recorder):
    await app_host.launch(Intent(action="android.intent.action.MAIN"))
    await app_host.attach_listener(recorder)
    topic = events.channel_topic(app_host.channel.name, "onNewIntent")
    assert bus.has_subscribers(topic)
    await app_host.detach_listener()
    assert not bus.has_subscribers(topic)

    await NavigationBridge(app_host).open("p-5")
    await settle(bus)
    assert recorder.calls == []

    await app_host.attach_listener(recorder)
    await settle(bus)
    assert recorder.calls == [{"action": "ACTION_OPEN_PRODUCT", "product_id": "p-5"}]


@pytest.mark.parametrize(
    "intent",
    [
        Intent(action=ACTION_INCREASE, extras={"product_id": "p-1"}),
        Intent(action="SOMETHING_ELSE", extras={"product_id": "p-1"}),
        Intent(action=ACTION_OPEN_PRODUCT),
    ],
)
async def test_non_matching_intents_are_ignored(app_host, bus, recorder, intent):
    await app_host.launch(Intent(action="android.intent.action.MAIN"))
    await app_host.attach_listener(recorder)
    await app_host.launch(intent)
    await settle(bus)
    assert recorder.calls == []
    assert app_host.history == []


async def test_initial_intent_queries(app_host, recorder):
    await app_host.launch(NavigationBridge.build_intent("p-4"))
    channel = await app_host.attach_listener(recorder)
    client = WidgetChannelClient(channel)

    assert await client.get_initial_intent() == ACTION_OPEN_PRODUCT
    assert await client.get_product_id() == "p-4"

    with pytest.raises(MethodNotImplemented):
        await channel.call("getBatteryLevel")


async def test_queries_before_any_launch(app_host, recorder):
    channel = await app_host.attach_listener(recorder)
    client = WidgetChannelClient(channel)
    assert await client.get_initial_intent() is None
    assert await client.get_product_id() is None


async def test_finish_makes_next_launch_cold(app_host, bus, recorder):
    await app_host.launch(NavigationBridge.build_intent("old"))
    await app_host.attach_listener(recorder)
    await settle(bus)
    await app_host.finish()

    await app_host.launch(NavigationBridge.build_intent("new"))
    assert app_host.launch_intent.product_id == "new"
    await app_host.attach_listener(recorder)
    await settle(bus)
    assert [call["product_id"] for call in recorder.calls] == ["old", "new"]
