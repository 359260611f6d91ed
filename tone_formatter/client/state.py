"""Client controller state machine and the pure helpers behind the UI.

Nothing in this module touches I/O. ``ToneFormatterController`` feeds events
into :class:`ClientStateMachine` and renders the outcome through a presenter.

States and transitions::

    IDLE        --submit-->   SUBMITTING   (text present, within limit)
    SUBMITTING  --success-->  IDLE
    SUBMITTING  --failure-->  ERROR
    ERROR       --retry-->    SUBMITTING   (replays the pending request)
    ERROR       --dismiss-->  IDLE
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tone_formatter.exceptions import ClientError, ErrorCategory, ToneFormatterError
from tone_formatter.models import Tone
from tone_formatter.services.gateway import utf16_length

MAX_TEXT_LENGTH = 10_000
DRAFT_KEY = "toneFormatter_text"
RESTORE_PROMPT_THRESHOLD = 50
FALLBACK_ERROR_MESSAGE = "Something went wrong. Please try again."
EMPTY_TEXT_MESSAGE = "Please enter some text to format."

ERROR_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.NETWORK: "Network error. Please check your connection and try again.",
    ErrorCategory.TIMEOUT: "Request timed out. Please try again.",
    ErrorCategory.CONFIGURATION: "Service temporarily unavailable. Please try again later.",
    ErrorCategory.UPSTREAM: "AI service temporarily unavailable. Please try again later.",
    ErrorCategory.LENGTH: "Text is too long. Please keep it under 10,000 characters.",
    ErrorCategory.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
}


class ControllerState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ERROR = "error"


class CounterTier(str, Enum):
    """Severity of the character counter relative to the limit."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InvalidTransitionError(RuntimeError):
    """Raised when an event is not allowed in the current state."""


@dataclass(frozen=True)
class PendingRequest:
    text: str
    tone: Tone


def char_counter_tier(length: int, max_length: int = MAX_TEXT_LENGTH) -> CounterTier:
    ratio = length / max_length
    if ratio > 0.9:
        return CounterTier.HIGH
    if ratio > 0.7:
        return CounterTier.MEDIUM
    return CounterTier.LOW


def can_format(text: str, submitting: bool, max_length: int = MAX_TEXT_LENGTH) -> bool:
    """Whether the format actions should be enabled."""

    return not submitting and bool(text.strip()) and utf16_length(text) <= max_length


def format_large_number(num: int) -> str:
    """Compact display of the usage count: ``1500 -> 1.5k``, ``999500 -> 1.0M``."""

    # 999,500 and up would print as "1000.0k", so it moves to the mega tier.
    if num >= 999_500:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}k"
    return str(num)


def error_message(error: ToneFormatterError | None) -> str:
    """Human-readable banner text for a failure."""

    if error is None:
        return FALLBACK_ERROR_MESSAGE
    known = ERROR_MESSAGES.get(error.category)
    if known is not None:
        return known
    return error.message or FALLBACK_ERROR_MESSAGE


def should_confirm_restore(draft: str) -> bool:
    """Only substantial drafts are worth asking about."""

    return len(draft) > RESTORE_PROMPT_THRESHOLD


class ClientStateMachine:
    """Idle/Submitting/Error lifecycle of a single client."""

    def __init__(self, max_length: int = MAX_TEXT_LENGTH) -> None:
        self.max_length = max_length
        self.state = ControllerState.IDLE
        self.pending: PendingRequest | None = None

    @property
    def submitting(self) -> bool:
        return self.state is ControllerState.SUBMITTING

    def submit(self, text: str, tone: Tone | str) -> PendingRequest | None:
        """Start a request; returns ``None`` when one is already in flight.

        Guard failures raise ``ClientError`` and leave the state unchanged.
        """

        if self.state is ControllerState.SUBMITTING:
            return None
        if self.state is not ControllerState.IDLE:
            raise InvalidTransitionError(f"cannot submit while {self.state.value}")

        text = text.strip()
        if not text:
            raise ClientError(EMPTY_TEXT_MESSAGE, category=ErrorCategory.VALIDATION)
        if utf16_length(text) > self.max_length:
            raise ClientError(
                ERROR_MESSAGES[ErrorCategory.LENGTH], category=ErrorCategory.LENGTH
            )
        try:
            tone = Tone(tone)
        except ValueError:
            raise ClientError(
                f"Unknown tone: {tone}", category=ErrorCategory.VALIDATION
            ) from None

        self.pending = PendingRequest(text=text, tone=tone)
        self.state = ControllerState.SUBMITTING
        return self.pending

    def succeed(self) -> None:
        self._expect(ControllerState.SUBMITTING, "success")
        self.state = ControllerState.IDLE

    def fail(self) -> None:
        self._expect(ControllerState.SUBMITTING, "failure")
        self.state = ControllerState.ERROR

    def retry(self) -> PendingRequest:
        """Replay the last submitted request unchanged."""

        self._expect(ControllerState.ERROR, "retry")
        if self.pending is None:
            raise InvalidTransitionError("nothing to retry")
        self.state = ControllerState.SUBMITTING
        return self.pending

    def dismiss(self) -> None:
        self._expect(ControllerState.ERROR, "dismiss")
        self.state = ControllerState.IDLE

    def _expect(self, state: ControllerState, event: str) -> None:
        if self.state is not state:
            raise InvalidTransitionError(f"cannot handle {event} while {self.state.value}")
