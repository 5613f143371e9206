"""Gemini AI integration package."""

from geochat.ai.gemini.client import GeminiClient
from geochat.ai.gemini.config import get_gemini_settings


def get_gemini_client() -> GeminiClient:
    """
    Get a configured Gemini client instance.

    Tracing is switched on through ``GEMINI_ENABLE_BRAINTRUST`` and
    ``GEMINI_BRAINTRUST_PROJECT_NAME``.

    Returns:
        GeminiClient: The configured Gemini client
    """
    settings = get_gemini_settings()
    return GeminiClient(
        settings=settings,
        enable_braintrust=settings.enable_braintrust,
        braintrust_project_name=settings.braintrust_project_name,
    )


__all__ = [
    "GeminiClient",
    "get_gemini_client",
]
