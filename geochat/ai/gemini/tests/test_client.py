"""Tests for the Gemini grounded-chat client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import types

from geochat.ai.gemini.client import (
    GeminiClient,
    build_config,
    build_contents,
    extract_grounding_chunks,
)
from geochat.ai.gemini.config import GeminiSettings
from geochat.ai.gemini.exceptions import (
    GENERIC_RESPONSE_ERROR,
    GeminiContentGenerationError,
)
from geochat.chat.constants import Role
from geochat.chat.schemas import (
    MapsGroundingChunk,
    Message,
    UserLocation,
    WebGroundingChunk,
)

LOCATION = UserLocation(latitude=37.77, longitude=-122.41)


@pytest.fixture
def settings():
    """Test settings."""
    return GeminiSettings(api_key="test-api-key", model_name="gemini-2.5-flash")


@pytest.fixture
def history():
    return [
        Message(id="init", role=Role.MODEL, text="Welcome"),
        Message(id="1700000000000", role=Role.USER, text="coffee?"),
        Message(id="1700000000001", role=Role.MODEL, text="Try Sightglass."),
    ]


def make_response(text: str, chunks: list[types.GroundingChunk]) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)]),
                grounding_metadata=types.GroundingMetadata(grounding_chunks=chunks),
            )
        ]
    )


def make_client(settings, response=None, error=None) -> GeminiClient:
    client = GeminiClient(settings=settings)
    genai_client = MagicMock()
    genai_client.aio.models.generate_content = AsyncMock(
        return_value=response, side_effect=error
    )
    client._client = genai_client
    return client


class TestRequestBuilding:
    def test_contents_skip_welcome_and_end_with_prompt(self, history):
        contents = build_contents("and tea?", history)

        assert [c.role for c in contents] == ["user", "model", "user"]
        assert [c.parts[0].text for c in contents] == [
            "coffee?",
            "Try Sightglass.",
            "and tea?",
        ]

    def test_config_enables_search_and_maps_with_location(self):
        config = build_config(LOCATION)

        assert config.tools[0].google_search is not None
        assert config.tools[1].google_maps is not None
        lat_lng = config.tool_config.retrieval_config.lat_lng
        assert lat_lng.latitude == 37.77
        assert lat_lng.longitude == -122.41
        assert config.temperature is None

    def test_config_temperature(self):
        assert build_config(LOCATION, temperature=0.3).temperature == 0.3


class TestGroundingExtraction:
    def test_web_chunks(self):
        response = make_response(
            "Try Blue Bottle.",
            [
                types.GroundingChunk(
                    web=types.GroundingChunkWeb(
                        uri="https://bluebottlecoffee.com", title="Blue Bottle"
                    )
                )
            ],
        )

        assert extract_grounding_chunks(response) == [
            WebGroundingChunk(uri="https://bluebottlecoffee.com", title="Blue Bottle")
        ]

    def test_maps_chunks_with_reviews_and_sourceless_dropped(self):
        response = SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    grounding_metadata=SimpleNamespace(
                        grounding_chunks=[
                            SimpleNamespace(
                                maps=SimpleNamespace(
                                    uri="https://maps.google.com/?cid=9",
                                    title="Sightglass Coffee",
                                    place_answer_sources=SimpleNamespace(
                                        review_snippets=[
                                            SimpleNamespace(
                                                google_maps_uri="https://maps.google.com/r/1",
                                                title="Great pour-over",
                                            )
                                        ]
                                    ),
                                ),
                                web=None,
                            ),
                            SimpleNamespace(
                                maps=None, web=SimpleNamespace(uri=None, title=None)
                            ),
                            SimpleNamespace(maps=None, web=None),
                        ]
                    )
                )
            ]
        )

        chunks = extract_grounding_chunks(response)

        assert len(chunks) == 1
        assert isinstance(chunks[0], MapsGroundingChunk)
        assert chunks[0].title == "Sightglass Coffee"
        assert chunks[0].review_snippets[0].uri == "https://maps.google.com/r/1"
        assert chunks[0].review_snippets[0].text == "Great pour-over"

    def test_no_candidates(self):
        assert extract_grounding_chunks(SimpleNamespace(candidates=None)) == []


class TestGetGroundedResponse:
    @pytest.mark.asyncio
    async def test_success(self, settings, history):
        response = make_response(
            "Try Blue Bottle.",
            [
                types.GroundingChunk(
                    web=types.GroundingChunkWeb(
                        uri="https://bluebottlecoffee.com", title="Blue Bottle"
                    )
                )
            ],
        )
        client = make_client(settings, response=response)

        result = await client.get_grounded_response("best coffee nearby", LOCATION, history)

        assert result.text == "Try Blue Bottle."
        assert len(result.grounding_chunks) == 1

        call = client._client.aio.models.generate_content.await_args
        assert call.kwargs["model"] == "gemini-2.5-flash"
        assert call.kwargs["contents"][-1].parts[0].text == "best coffee nearby"
        assert call.kwargs["config"].tool_config.retrieval_config.lat_lng.latitude == 37.77

    @pytest.mark.asyncio
    async def test_non_string_text_becomes_empty(self, settings):
        client = make_client(settings, response=SimpleNamespace(text=None, candidates=[]))

        result = await client.get_grounded_response("hi", LOCATION, [])

        assert result.text == ""
        assert result.grounding_chunks == []

    @pytest.mark.asyncio
    async def test_api_failure_raises_generic_error(self, settings):
        cause = RuntimeError("401 API key not valid")
        client = make_client(settings, error=cause)

        with pytest.raises(GeminiContentGenerationError) as exc_info:
            await client.get_grounded_response("hi", LOCATION, [])

        assert exc_info.value.message == GENERIC_RESPONSE_ERROR
        assert "401" not in str(exc_info.value)
        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_client_init_failure_raises_generic_error(self, settings):
        client = GeminiClient(settings=settings)

        with patch("geochat.ai.gemini.client.genai.Client", side_effect=ValueError("bad key")):
            with pytest.raises(GeminiContentGenerationError) as exc_info:
                await client.get_grounded_response("hi", LOCATION, [])

        assert exc_info.value.message == GENERIC_RESPONSE_ERROR

    def test_braintrust_setup_when_enabled(self, settings):
        client = GeminiClient(
            settings=settings,
            enable_braintrust=True,
            braintrust_project_name="geochat-dev",
        )

        with patch("geochat.ai.gemini.client.setup_genai") as setup, patch(
            "geochat.ai.gemini.client.genai.Client"
        ) as genai_client:
            client._get_client()

        setup.assert_called_once_with(project_name="geochat-dev")
        genai_client.assert_called_once_with(api_key="test-api-key")
