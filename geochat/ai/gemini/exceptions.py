"""Custom exceptions for the Gemini integration package."""

GENERIC_RESPONSE_ERROR = (
    "Failed to get response from AI. Please check your connection and API key."
)


class GeminiError(Exception):
    """Base exception for all Gemini-related errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GeminiAuthenticationError(GeminiError):
    """Raised when the Gemini client cannot be created from the configured key."""

    pass


class GeminiContentGenerationError(GeminiError):
    """Raised when content generation fails.

    The message is always safe to show to the user; the cause is logged.
    """

    def __init__(
        self, message: str = GENERIC_RESPONSE_ERROR, status_code: int | None = None
    ) -> None:
        super().__init__(message, status_code=status_code)
