"""
Chat state and its transitions.

``ChatState`` is immutable. Every change goes through one of the transition
functions below, each returning a new state. The coordinator owns the current
state and is the only caller.
"""

import time
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from geochat.chat.constants import (
    LOCATION_DENIED_ERROR,
    LOCATION_REQUIRED_ERROR,
    LOCATION_UNSUPPORTED_ERROR,
    WELCOME_MESSAGE_ID,
    WELCOME_MESSAGE_TEXT,
    ChatPhase,
    Role,
)
from geochat.chat.schemas import Message, UserLocation


class ChatState(BaseModel):
    """Everything the coordinator tracks between events."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()
    is_loading: bool = False
    error: str | None = None
    location: UserLocation | None = None

    @property
    def phase(self) -> ChatPhase:
        if self.is_loading:
            return ChatPhase.PENDING
        if self.error:
            return ChatPhase.ERROR
        if self.location is None:
            return ChatPhase.IDLE
        return ChatPhase.READY


def welcome_message() -> Message:
    return Message(id=WELCOME_MESSAGE_ID, role=Role.MODEL, text=WELCOME_MESSAGE_TEXT)


def next_message_id(messages: Sequence[Message], now_ms: int | None = None) -> str:
    """Millisecond timestamp id, bumped past the newest numeric id so ids stay unique."""
    candidate = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    for message in reversed(messages):
        if message.id.isdigit():
            candidate = max(candidate, int(message.id) + 1)
            break
    return str(candidate)


def initial_state(messages: Sequence[Message] = ()) -> ChatState:
    return ChatState(messages=tuple(messages))


def location_granted(state: ChatState, location: UserLocation) -> ChatState:
    """First successful read wins. Seeds the welcome message into an empty chat."""
    if state.location is not None:
        return state
    messages = state.messages or (welcome_message(),)
    return state.model_copy(
        update={"location": location, "error": None, "messages": messages}
    )


def location_denied(state: ChatState, reason: str) -> ChatState:
    return state.model_copy(
        update={"error": LOCATION_DENIED_ERROR.format(reason=reason)}
    )


def location_unsupported(state: ChatState) -> ChatState:
    return state.model_copy(update={"error": LOCATION_UNSUPPORTED_ERROR})


def location_required(state: ChatState) -> ChatState:
    return state.model_copy(update={"error": LOCATION_REQUIRED_ERROR})


def submission_started(state: ChatState, user_message: Message) -> ChatState:
    """Optimistically append the user's turn and enter the pending state."""
    return state.model_copy(
        update={
            "messages": state.messages + (user_message,),
            "is_loading": True,
            "error": None,
        }
    )


def response_received(state: ChatState, model_message: Message) -> ChatState:
    return state.model_copy(
        update={"messages": state.messages + (model_message,), "is_loading": False}
    )


def response_failed(state: ChatState, error: str) -> ChatState:
    return state.model_copy(update={"is_loading": False, "error": error})


def response_abandoned(state: ChatState) -> ChatState:
    """Leave the pending state when a request ends without an answer."""
    return state.model_copy(update={"is_loading": False})


def history_cleared(state: ChatState) -> ChatState:
    return state.model_copy(update={"messages": ()})
