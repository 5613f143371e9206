"""
Input capture: a draft string with optional speech-to-text dictation.

The speech capability is injected. When present it runs a continuous session
whose result events carry the cumulative result set; the draft is rebuilt
from that set on every event.
"""

from typing import Awaitable, Callable, Protocol, Sequence

from geochat.utils.logger import logger


class SpeechAlternative(Protocol):
    transcript: str


SpeechResults = Sequence[Sequence[SpeechAlternative]]


class SpeechCapture(Protocol):
    """Continuous speech recognition session."""

    continuous: bool
    interim_results: bool
    lang: str

    def start(
        self,
        on_result: Callable[[SpeechResults], None],
        on_end: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None: ...

    def stop(self) -> None: ...


def transcript_from_results(results: SpeechResults) -> str:
    """Join the best alternative of every result, in order."""
    return "".join(result[0].transcript for result in results if len(result) > 0)


class ChatInput:
    """Draft holder that hands finalized text to ``on_submit``."""

    def __init__(
        self,
        on_submit: Callable[[str], Awaitable[None]],
        speech: SpeechCapture | None = None,
        lang: str = "en-US",
    ) -> None:
        self._on_submit = on_submit
        self._speech = speech
        self.draft = ""
        self.is_listening = False

        if speech is None:
            logger.warning("Speech recognition is not supported by this client")
        else:
            speech.continuous = True
            speech.interim_results = True
            speech.lang = lang

    @property
    def has_dictation(self) -> bool:
        return self._speech is not None

    def set_draft(self, text: str) -> None:
        self.draft = text

    def toggle_dictation(self) -> None:
        """Start a fresh dictation session, or stop the running one."""
        if self._speech is None:
            return

        if self.is_listening:
            self.is_listening = False
            self._speech.stop()
        else:
            self.draft = ""
            self.is_listening = True
            self._speech.start(self._handle_result, self._handle_end, self._handle_error)

    def _handle_result(self, results: SpeechResults) -> None:
        # Late events after stop must not resurrect a submitted draft
        if not self.is_listening:
            return
        self.draft = transcript_from_results(results)

    def _handle_end(self) -> None:
        self.is_listening = False

    def _handle_error(self, error: str) -> None:
        logger.error("Speech recognition error", error=error)
        self.is_listening = False

    def _stop_dictation(self) -> None:
        if self._speech is not None and self.is_listening:
            self.is_listening = False
            self._speech.stop()

    async def submit(self, is_loading: bool, disabled: bool) -> bool:
        """
        Stop dictation, then hand the draft over if it may be sent.

        Args:
            is_loading: A request is already in flight
            disabled: The location precondition is unmet

        Returns:
            bool: True when the draft was accepted and passed on
        """
        self._stop_dictation()

        text = self.draft
        if not text.strip() or is_loading or disabled:
            return False

        self.draft = ""
        await self._on_submit(text)
        return True
