"""Custom exceptions for the chat package."""


class ChatError(Exception):
    """Base exception for all chat errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ChatStorageError(ChatError):
    """Raised when the conversation cannot be written to durable storage."""

    pass
