"""Google Gemini API client for location-grounded chat."""

from typing import Any, Sequence

from braintrust.wrappers.google_genai import setup_genai
from google import genai
from google.genai import types

from geochat.ai.gemini.config import GeminiSettings
from geochat.ai.gemini.exceptions import (
    GeminiAuthenticationError,
    GeminiContentGenerationError,
    GeminiError,
)
from geochat.ai.gemini.schemas import GroundedResponse
from geochat.chat.constants import WELCOME_MESSAGE_ID, Role
from geochat.chat.schemas import (
    MapsGroundingChunk,
    Message,
    ReviewSnippet,
    UserLocation,
    WebGroundingChunk,
    has_source,
)
from geochat.utils.logger import logger


def build_contents(prompt: str, history: Sequence[Message]) -> list[types.Content]:
    """Turn the stored conversation plus the new prompt into Gemini turns.

    The synthetic welcome message is never sent.
    """
    contents = [
        types.Content(role=message.role.value, parts=[types.Part(text=message.text)])
        for message in history
        if message.id != WELCOME_MESSAGE_ID
    ]
    contents.append(types.Content(role=Role.USER.value, parts=[types.Part(text=prompt)]))
    return contents


def build_config(
    location: UserLocation, temperature: float | None = None
) -> types.GenerateContentConfig:
    """Enable Search and Maps grounding, biased towards the user's position."""
    generation_config: dict[str, Any] = {
        "tools": [
            types.Tool(google_search=types.GoogleSearch()),
            types.Tool(google_maps=types.GoogleMaps()),
        ],
        "tool_config": types.ToolConfig(
            retrieval_config=types.RetrievalConfig(
                lat_lng=types.LatLng(
                    latitude=location.latitude, longitude=location.longitude
                )
            )
        ),
    }
    if temperature is not None:
        generation_config["temperature"] = temperature
    return types.GenerateContentConfig(**generation_config)


def _convert_chunk(chunk: Any) -> WebGroundingChunk | MapsGroundingChunk | None:
    maps = getattr(chunk, "maps", None)
    if maps is not None:
        sources = getattr(maps, "place_answer_sources", None)
        snippets = getattr(sources, "review_snippets", None) or []
        return MapsGroundingChunk(
            uri=getattr(maps, "uri", None),
            title=getattr(maps, "title", None),
            review_snippets=tuple(
                ReviewSnippet(
                    uri=getattr(snippet, "google_maps_uri", None)
                    or getattr(snippet, "uri", None),
                    text=getattr(snippet, "text", None)
                    or getattr(snippet, "title", None),
                )
                for snippet in snippets
            ),
        )

    web = getattr(chunk, "web", None)
    if web is not None:
        return WebGroundingChunk(
            uri=getattr(web, "uri", None), title=getattr(web, "title", None)
        )
    return None


def extract_grounding_chunks(
    response: Any,
) -> list[WebGroundingChunk | MapsGroundingChunk]:
    """Read citations from the first candidate, dropping ones with no URI and no title."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    raw_chunks = getattr(metadata, "grounding_chunks", None) or []

    chunks = []
    for raw_chunk in raw_chunks:
        chunk = _convert_chunk(raw_chunk)
        if chunk is None or not has_source(chunk):
            logger.debug("Skipping grounding chunk without a source")
            continue
        chunks.append(chunk)
    return chunks


class GeminiClient:
    """Async client for Google Gemini API.

    Sends one conversation turn with Google Search and Google Maps grounding
    and returns the generated text with its citations.
    """

    def __init__(
        self,
        settings: GeminiSettings,
        enable_braintrust: bool = False,
        braintrust_project_name: str | None = None,
    ) -> None:
        """Initialize Gemini client.

        Args:
            settings: Gemini settings instance with API configuration
            enable_braintrust: Whether to enable Braintrust tracing for this client instance
            braintrust_project_name: Braintrust project name (only used if enable_braintrust=True)
        """
        self.settings = settings
        self._client: genai.Client | None = None
        self.enable_braintrust = enable_braintrust
        self.braintrust_project_name = braintrust_project_name

    def _get_client(self) -> genai.Client:
        """Get or create the Gemini client.

        Automatically sets up Braintrust tracing if enabled.
        """
        if self._client is None:
            try:
                if self.enable_braintrust and self.braintrust_project_name:
                    logger.info(
                        f"Setting up Gemini with Braintrust tracing enabled (project: {self.braintrust_project_name})"
                    )
                    setup_genai(project_name=self.braintrust_project_name)

                self._client = genai.Client(api_key=self.settings.api_key)
                logger.info("Gemini client initialized")
            except Exception as e:
                logger.error("Failed to initialize Gemini client", error=str(e))
                raise GeminiAuthenticationError(f"Failed to authenticate: {e}")
        return self._client

    async def get_grounded_response(
        self,
        prompt: str,
        location: UserLocation,
        history: Sequence[Message],
    ) -> GroundedResponse:
        """Generate a grounded answer for the newest user turn.

        Args:
            prompt: The text the user just submitted
            location: Position used to bias search and maps results
            history: Conversation so far, excluding the new prompt

        Returns:
            GroundedResponse: Generated text and grounding chunks (possibly empty)

        Raises:
            GeminiContentGenerationError: On any failure; the cause is logged
        """
        try:
            client = self._get_client()
            contents = build_contents(prompt, history)
            config = build_config(location, temperature=self.settings.temperature)

            logger.info(
                "Generating grounded content",
                model_name=self.settings.model_name,
                turn_count=len(contents),
            )

            response = await client.aio.models.generate_content(
                model=self.settings.model_name,
                contents=contents,
                config=config,
            )

            text = response.text
            if not isinstance(text, str):
                logger.warning("Gemini returned no text", finish_reason=_finish_reason(response))
                text = ""

            grounding_chunks = extract_grounding_chunks(response)
            logger.info(
                "Grounded content generated",
                text_length=len(text),
                chunk_count=len(grounding_chunks),
            )
            return GroundedResponse(text=text, grounding_chunks=grounding_chunks)

        except Exception as e:
            logger.error(
                "Error calling Gemini API", error=str(e), error_type=type(e).__name__
            )
            status_code = e.status_code if isinstance(e, GeminiError) else None
            raise GeminiContentGenerationError(status_code=status_code) from e


def _finish_reason(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    return str(reason) if reason is not None else None
