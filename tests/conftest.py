import pytest

from tally.host.consumer import CommandConsumer
from tally.host.navigation import ApplicationHost
from tally.shared.core.configuration import SystemConfig
from tally.shared.core.event_bus import EventBus
from tally.shared.infrastructure.persistence import CounterRepository, MemoryStateStore
from tally.shared.infrastructure.platform import InMemoryWidgetHost
from tally.widget.provider import CounterWidgetProvider


@pytest.fixture
def config():
    return SystemConfig()


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def repository():
    repo = CounterRepository(":memory:")
    yield repo
    repo.close()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def widget_host():
    return InMemoryWidgetHost()


@pytest.fixture
def provider(store, widget_host, config):
    provider = CounterWidgetProvider(store, widget_host, config.widget)
    widget_host.bind(provider.on_receive)
    return provider


@pytest.fixture
def consumer(store, repository, widget_host, bus, config):
    return CommandConsumer(
        store,
        repository,
        refresh=widget_host.request_update,
        event_bus=bus,
        config=config.consumer,
    )


@pytest.fixture
def app_host(bus, config):
    return ApplicationHost(bus, config.channel.name)


class Recorder:
    """Async listener that remembers every payload it was given."""

    def __init__(self):
        self.calls = []

    async def __call__(self, payload):
        self.calls.append(payload)


@pytest.fixture
def recorder():
    return Recorder()
