"""
FastAPI router exposing the chat coordinator to the browser.

The service holds one conversation and one location per process. Every
client talking to it shares that conversation, so deploy one instance per
user.
"""

from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from geochat.chat.coordinator import ChatCoordinator
from geochat.chat.dependencies import get_chat_coordinator
from geochat.chat.exceptions import ChatStorageError
from geochat.chat.location import LocationProvider, geolocation_from_report
from geochat.chat.renderer import RenderedMessage, render_html, render_message
from geochat.chat.schemas import (
    ChatStateResponse,
    LocationReport,
    SendMessageRequest,
    SendMessageResponse,
)
from geochat.utils.logger import logger

router = APIRouter(prefix="/chat", tags=["Chat"])


def _state_response(coordinator: ChatCoordinator) -> ChatStateResponse:
    state = coordinator.state
    return ChatStateResponse(
        messages=list(state.messages),
        is_loading=state.is_loading,
        error=state.error,
        location=state.location,
        phase=state.phase.value,
    )


@router.get("/state", response_model=ChatStateResponse)
async def get_state(
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> ChatStateResponse:
    """Return the current conversation, loading flag, error and location."""
    return _state_response(coordinator)


@router.post("/location", response_model=ChatStateResponse)
async def report_location(
    report: LocationReport,
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> ChatStateResponse:
    """
    Feed the browser's geolocation outcome to the coordinator.

    Args:
        report: Coordinates, a denial reason, or ``supported=False``
        coordinator: Chat coordinator dependency

    Returns:
        ChatStateResponse: State after the location transition
    """
    coordinator.start(LocationProvider(geolocation_from_report(report)))
    return _state_response(coordinator)


@router.post("/messages", response_model=SendMessageResponse)
async def send_message(
    request: SendMessageRequest,
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> SendMessageResponse:
    """
    Submit one user turn and wait for the grounded answer.

    Backend failures do not fail the request: they show up in ``state.error``.

    Args:
        request: The text to send
        coordinator: Chat coordinator dependency

    Returns:
        SendMessageResponse: Whether the turn was accepted, plus the new state
    """
    coordinator.input.set_draft(request.text)
    accepted = await coordinator.submit_input()
    if not accepted:
        logger.info("Submission rejected", phase=coordinator.state.phase.value)
    return SendMessageResponse(accepted=accepted, state=_state_response(coordinator))


@router.delete("/messages", response_model=ChatStateResponse)
async def clear_messages(
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> ChatStateResponse:
    """Clear the conversation and its persisted copy."""
    try:
        coordinator.clear_history()
    except ChatStorageError as e:
        logger.error("Failed to clear chat history", error=e.message)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Failed to clear chat history: {e.message}",
        )
    return _state_response(coordinator)


@router.get("/messages/rendered", response_model=list[RenderedMessage])
async def get_rendered_messages(
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> list[RenderedMessage]:
    """Return every message as renderable blocks and source links."""
    return [render_message(message) for message in coordinator.state.messages]


@router.get("/transcript", response_class=HTMLResponse)
async def get_transcript(
    coordinator: Annotated[ChatCoordinator, Depends(get_chat_coordinator)],
) -> HTMLResponse:
    """Return the conversation as an HTML fragment."""
    rendered = [render_message(message) for message in coordinator.state.messages]
    return HTMLResponse(content=render_html(rendered))
