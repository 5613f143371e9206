"""
Conversation persistence.

History is kept as a single serialized message list in one keyed slot of a
small key/value storage, read once at startup and overwritten on every
change.
"""

import json
import os
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import ValidationError

from geochat.chat.exceptions import ChatStorageError
from geochat.chat.schemas import Message, MessageList
from geochat.utils.logger import logger


class KeyValueStorage(Protocol):
    """Durable string slots addressed by key."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Storage that lives as long as the process."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Storage backed by a single JSON object on disk.

    Writes go to a sibling temp file which then replaces the original, so a
    crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "Storage file unreadable, starting empty",
                path=str(self.path),
                error=str(e),
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file is not a JSON object", path=str(self.path))
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(items), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write storage file", path=str(self.path), error=str(e))
            raise ChatStorageError(f"Failed to write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


class ConversationStore:
    """Loads and saves the ordered message list under one storage key."""

    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> list[Message]:
        """
        Rehydrate the saved history.

        Returns:
            list[Message]: Saved messages, or an empty list when nothing is
            stored or the stored value cannot be parsed
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        try:
            messages = MessageList.validate_json(raw)
        except ValidationError as e:
            logger.error(
                "Could not parse chat history from storage",
                key=self.key,
                error=str(e),
            )
            return []
        logger.info("Chat history loaded", key=self.key, message_count=len(messages))
        return messages

    def save(self, messages: Sequence[Message]) -> None:
        """Overwrite the slot with the full list. Empty lists are not written."""
        if not messages:
            return
        self.storage.set_item(self.key, MessageList.dump_json(list(messages)).decode())

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        logger.info("Chat history cleared", key=self.key)
