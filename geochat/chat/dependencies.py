"""
FastAPI dependencies for the chat package.

This module provides dependency injection functions for chat endpoints,
following the same lazy singleton pattern as the settings modules.
"""

from geochat.ai.gemini import get_gemini_client
from geochat.chat.config import StorageBackend, get_chat_settings
from geochat.chat.coordinator import ChatCoordinator
from geochat.chat.store import (
    ConversationStore,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
)
from geochat.utils.logger import logger

_chat_coordinator: ChatCoordinator | None = None


def get_storage() -> KeyValueStorage:
    """
    Build the storage backend selected in settings.

    Returns:
        KeyValueStorage: File or in-memory storage
    """
    settings = get_chat_settings()
    if settings.storage_backend == StorageBackend.MEMORY:
        return InMemoryStorage()
    return JsonFileStorage(settings.history_path)


def get_chat_coordinator() -> ChatCoordinator:
    """
    Get or create the chat coordinator singleton.

    The conversation is rehydrated from storage on first use.

    Returns:
        ChatCoordinator: The chat coordinator instance
    """
    global _chat_coordinator
    if _chat_coordinator is None:
        settings = get_chat_settings()
        store = ConversationStore(get_storage(), key=settings.history_key)
        _chat_coordinator = ChatCoordinator(
            store=store,
            responder=get_gemini_client(),
            speech_lang=settings.speech_lang,
        )
        logger.info("Initialized ChatCoordinator")
    return _chat_coordinator


def set_chat_coordinator(coordinator: ChatCoordinator | None) -> None:
    """
    Replace the coordinator singleton.

    Args:
        coordinator: The coordinator to use, or None to rebuild lazily
    """
    global _chat_coordinator
    _chat_coordinator = coordinator
