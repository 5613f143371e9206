"""
Root chat coordinator.

Owns the chat state and mutates it only through the transition functions in
``geochat.chat.state``. After every change it persists the history (when
non-empty) and asks attached views to scroll to the latest message.
"""

from typing import Protocol, Sequence

from geochat.ai.gemini.exceptions import GeminiError
from geochat.ai.gemini.schemas import GroundedResponse
from geochat.chat.chat_input import ChatInput, SpeechCapture
from geochat.chat.constants import UNEXPECTED_ERROR, Role
from geochat.chat.exceptions import ChatStorageError
from geochat.chat.location import LocationProvider
from geochat.chat.schemas import Message, UserLocation
from geochat.chat.state import (
    ChatState,
    history_cleared,
    initial_state,
    location_denied,
    location_granted,
    location_required,
    location_unsupported,
    next_message_id,
    response_abandoned,
    response_failed,
    response_received,
    submission_started,
)
from geochat.chat.store import ConversationStore
from geochat.utils.logger import logger


class GroundedResponder(Protocol):
    async def get_grounded_response(
        self,
        prompt: str,
        location: UserLocation,
        history: Sequence[Message],
    ) -> GroundedResponse: ...


class ChatView(Protocol):
    def scroll_to_latest(self) -> None: ...


class ChatCoordinator:
    """Wires location, input, the AI backend and the conversation store."""

    def __init__(
        self,
        store: ConversationStore,
        responder: GroundedResponder,
        speech: SpeechCapture | None = None,
        speech_lang: str = "en-US",
    ) -> None:
        self.store = store
        self.responder = responder
        self._state = initial_state(store.load())
        self._views: list[ChatView] = []
        self.input = ChatInput(
            on_submit=self._submit_text, speech=speech, lang=speech_lang
        )

    @property
    def state(self) -> ChatState:
        return self._state

    def add_view(self, view: ChatView) -> None:
        self._views.append(view)

    def _apply(self, new_state: ChatState) -> None:
        self._state = new_state
        if new_state.messages:
            try:
                self.store.save(new_state.messages)
            except ChatStorageError as e:
                logger.error("Failed to persist chat history", error=e.message)
        for view in self._views:
            view.scroll_to_latest()

    # ========== Location ==========

    def start(self, provider: LocationProvider) -> None:
        """Kick off the one-shot location request."""
        provider.request(self)

    def on_location_acquired(self, location: UserLocation) -> None:
        if self._state.location is not None:
            logger.info("Location already set for this session, ignoring update")
            return
        logger.info("Location acquired")
        self._apply(location_granted(self._state, location))

    def on_location_error(self, reason: str) -> None:
        if self._state.location is not None:
            logger.info("Location already set for this session, ignoring error", reason=reason)
            return
        logger.warning("Location request failed", reason=reason)
        self._apply(location_denied(self._state, reason))

    def on_location_unsupported(self) -> None:
        if self._state.location is not None:
            logger.info("Location already set for this session, ignoring report")
            return
        self._apply(location_unsupported(self._state))

    # ========== Messages ==========

    async def submit_input(self) -> bool:
        """Submit the current draft through the input component."""
        if self._state.location is None and self.input.draft.strip():
            self._apply(location_required(self._state))
        return await self.input.submit(
            is_loading=self._state.is_loading,
            disabled=self._state.location is None,
        )

    async def _submit_text(self, text: str) -> None:
        await self.send_message(text)

    async def send_message(self, text: str) -> bool:
        """
        Send one user turn and append the grounded answer.

        Args:
            text: Raw user text

        Returns:
            bool: False when the submission was a no-op
        """
        state = self._state
        location = state.location
        if location is None:
            self._apply(location_required(state))
            return False
        if state.is_loading or not text.strip():
            return False

        history = list(state.messages)
        user_message = Message(
            id=next_message_id(history), role=Role.USER, text=text
        )
        self._apply(submission_started(state, user_message))
        logger.info("[USER_INPUT]", message_id=user_message.id, input=text)

        try:
            response = await self.responder.get_grounded_response(
                text, location, history
            )
        except GeminiError as e:
            self._apply(response_failed(self._state, e.message))
            return True
        except Exception as e:
            logger.exception("Unexpected error while getting a response", error=str(e))
            self._apply(response_failed(self._state, UNEXPECTED_ERROR))
            return True
        else:
            model_message = Message(
                id=next_message_id(self._state.messages),
                role=Role.MODEL,
                text=response.text,
                grounding_chunks=tuple(response.grounding_chunks),
            )
            self._apply(response_received(self._state, model_message))
            logger.info(
                "[AGENT_OUTPUT]",
                message_id=model_message.id,
                chunk_count=len(response.grounding_chunks),
            )
            return True
        finally:
            # Cancellation skips every branch above
            if self._state.is_loading:
                logger.warning(
                    "Request ended without a response", message_id=user_message.id
                )
                self._apply(response_abandoned(self._state))

    def clear_history(self) -> None:
        """Forget the conversation, in memory and in storage."""
        self.store.clear()
        self._apply(history_cleared(self._state))
