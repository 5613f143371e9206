"""
Configuration management for the chat package.

This module handles environment variable configuration for conversation
storage and dictation using Pydantic settings.
"""

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from geochat.utils.logger import logger


class StorageBackend(str, Enum):
    """Available conversation storage backends."""

    FILE = "file"
    MEMORY = "memory"


class ChatSettings(BaseSettings):
    """Configuration for the chat coordinator using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="CHAT_"
    )

    storage_backend: StorageBackend = Field(
        default=StorageBackend.FILE, description="Where conversation history lives"
    )
    history_path: Path = Field(
        default=Path(".geochat/storage.json"),
        description="JSON file backing the file storage backend",
    )
    history_key: str = Field(
        default="geoChatHistory", description="Storage slot holding the history"
    )
    speech_lang: str = Field(default="en-US", description="Dictation language")


_chat_settings: ChatSettings | None = None


def get_chat_settings() -> ChatSettings:
    """
    Get the global chat settings instance.

    Returns:
        ChatSettings: The global settings instance
    """
    global _chat_settings
    if _chat_settings is None:
        _chat_settings = ChatSettings()
        logger.info("ChatSettings loaded")
    return _chat_settings


def set_chat_settings(settings: ChatSettings) -> None:
    """
    Set the global chat settings instance.

    Args:
        settings: The settings to set
    """
    global _chat_settings
    _chat_settings = settings
