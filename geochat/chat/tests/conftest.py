"""Shared fixtures for chat tests."""

import pytest

from geochat.chat.coordinator import ChatCoordinator
from geochat.chat.store import ConversationStore, InMemoryStorage
from geochat.chat.tests.fakes import SAN_FRANCISCO, FakeResponder


@pytest.fixture
def storage():
    """Empty in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    """Conversation store over the in-memory storage."""
    return ConversationStore(storage, key="geoChatHistory")


@pytest.fixture
def responder():
    """Responder that answers "ok" with no citations."""
    return FakeResponder()


@pytest.fixture
def coordinator(store, responder):
    """Coordinator with no location yet."""
    return ChatCoordinator(store=store, responder=responder)


@pytest.fixture
def located_coordinator(coordinator):
    """Coordinator that already knows the user is in San Francisco."""
    coordinator.on_location_acquired(SAN_FRANCISCO)
    return coordinator
