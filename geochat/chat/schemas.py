"""
Pydantic schemas for the chat domain.

Messages, grounding chunks and locations are immutable value objects. The
grounding chunk union is discriminated on ``kind`` so persisted history
deserializes back into the right variant.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from geochat.chat.constants import Role


class UserLocation(BaseModel):
    """Latitude/longitude pair reported by the device."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(
        ..., ge=-180, le=180, description="Longitude in degrees"
    )


class ReviewSnippet(BaseModel):
    """A review excerpt backing a maps answer."""

    model_config = ConfigDict(frozen=True)

    uri: str | None = None
    text: str | None = None


class WebGroundingChunk(BaseModel):
    """Citation pointing at a web search result."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["web"] = "web"
    uri: str | None = None
    title: str | None = None


class MapsGroundingChunk(BaseModel):
    """Citation pointing at a Google Maps place."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["maps"] = "maps"
    uri: str | None = None
    title: str | None = None
    review_snippets: tuple[ReviewSnippet, ...] = ()


GroundingChunk = Annotated[
    WebGroundingChunk | MapsGroundingChunk,
    Field(discriminator="kind"),
]


def has_source(chunk: WebGroundingChunk | MapsGroundingChunk) -> bool:
    """A chunk is usable when it carries at least a URI or a title."""
    return bool(chunk.uri) or bool(chunk.title)


class Message(BaseModel):
    """A single entry in the conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique message id")
    role: Role = Field(..., description="Message author")
    text: str = Field(default="", description="Message text, may be empty")
    grounding_chunks: tuple[GroundingChunk, ...] | None = Field(
        default=None, description="Citations, only present on model messages"
    )

    @model_validator(mode="after")
    def _chunks_only_on_model(self) -> "Message":
        if self.grounding_chunks and self.role != Role.MODEL:
            raise ValueError("grounding chunks are only allowed on model messages")
        return self


MessageList = TypeAdapter(list[Message])


# ========== HTTP Schemas ==========


class LocationReport(BaseModel):
    """Outcome of a browser geolocation request.

    Exactly one of: a position, a denial reason, or ``supported=False``.
    """

    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    error: str | None = Field(
        default=None, description="Reason reported by the browser on failure"
    )
    supported: bool = Field(
        default=True, description="False when the browser has no geolocation"
    )


class SendMessageRequest(BaseModel):
    """Request model for submitting a user turn."""

    text: str = Field(..., description="Raw text typed or dictated by the user")


class ChatStateResponse(BaseModel):
    """Snapshot of the coordinator state."""

    messages: list[Message]
    is_loading: bool
    error: str | None = None
    location: UserLocation | None = None
    phase: str


class SendMessageResponse(BaseModel):
    """Result of a submission attempt."""

    accepted: bool = Field(..., description="False when the submission was a no-op")
    state: ChatStateResponse
