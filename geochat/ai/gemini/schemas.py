"""Pydantic schemas for Gemini integration responses."""

from pydantic import BaseModel, Field

from geochat.chat.schemas import GroundingChunk


class GroundedResponse(BaseModel):
    """Generated answer plus the citations the backend grounded it in."""

    text: str = Field(default="", description="Generated text content")
    grounding_chunks: list[GroundingChunk] = Field(
        default_factory=list, description="Web and maps citations"
    )
