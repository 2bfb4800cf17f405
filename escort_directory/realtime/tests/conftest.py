import pytest

from escort_directory.realtime.hub import ChatHub
from escort_directory.realtime.registry import ConnectionRegistry

from .fakes import InMemoryMessageStore
from .fakes import InMemoryPresenceStore
from .fakes import RecordingSink
from .fakes import StaticTokenVerifier


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def message_store():
    return InMemoryMessageStore()


@pytest.fixture
def presence_store():
    return InMemoryPresenceStore()


@pytest.fixture
def hub(sink, message_store, presence_store):
    return ChatHub.build(
        sink,
        messages=message_store,
        users=presence_store,
        token_verifier=StaticTokenVerifier(),
    )
