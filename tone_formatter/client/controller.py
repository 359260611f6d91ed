"""Client controller wiring the state machine to I/O."""

from __future__ import annotations

import logging

from tone_formatter.client.api import ToneFormatterClient
from tone_formatter.client.drafts import DraftStorage
from tone_formatter.client.presenter import Presenter
from tone_formatter.client.state import (
    MAX_TEXT_LENGTH,
    ClientStateMachine,
    ControllerState,
    PendingRequest,
    can_format,
    char_counter_tier,
    error_message,
    format_large_number,
    should_confirm_restore,
)
from tone_formatter.exceptions import ClientError
from tone_formatter.models import Tone
from tone_formatter.services.gateway import utf16_length

logger = logging.getLogger(__name__)

CLEAR_PROMPT = "Are you sure you want to clear all text?"
RESTORE_PROMPT = "Restore your previous text?"
UNLOAD_WARNING = "Text formatting in progress. Are you sure you want to leave?"


class ToneFormatterController:
    """Drives formatting, retry, drafts and the usage display for one user."""

    def __init__(
        self,
        api: ToneFormatterClient,
        drafts: DraftStorage,
        presenter: Presenter,
        max_length: int = MAX_TEXT_LENGTH,
    ) -> None:
        self._api = api
        self._drafts = drafts
        self._presenter = presenter
        self._machine = ClientStateMachine(max_length=max_length)
        self._max_length = max_length
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    @property
    def state(self) -> ControllerState:
        return self._machine.state

    @property
    def pending(self) -> PendingRequest | None:
        return self._machine.pending

    def set_text(self, text: str) -> None:
        """Replace the input text, refresh the counter and save the draft."""

        self._text = text
        self._presenter.show_text(text)
        self._render_controls()
        self._drafts.save(text)

    async def format(self, tone: Tone | str) -> bool:
        """Submit the current text; returns whether it was rewritten."""

        try:
            request = self._machine.submit(self._text, tone)
        except ClientError as exc:
            self._presenter.show_error(error_message(exc), retryable=False)
            return False
        if request is None:
            return False
        return await self._run(request)

    async def retry(self) -> bool:
        """Replay the last submitted request without re-reading the input."""

        request = self._machine.retry()
        self._presenter.hide_error()
        return await self._run(request)

    def dismiss_error(self) -> None:
        self._machine.dismiss()
        self._presenter.hide_error()

    def clear(self) -> bool:
        if self._text.strip() and not self._presenter.confirm(CLEAR_PROMPT):
            return False
        self._reset_input()
        return True

    def restore_draft(self) -> bool:
        """Load the saved draft on startup; returns whether it was kept."""

        draft = self._drafts.load()
        if not draft or not draft.strip():
            return False

        self._text = draft
        self._presenter.show_text(draft)
        self._render_controls()
        if should_confirm_restore(draft) and not self._presenter.confirm(RESTORE_PROMPT):
            self._reset_input()
            return False
        return True

    async def refresh_usage(self) -> None:
        try:
            total = await self._api.usage()
        except ClientError:
            self._presenter.show_usage("?")
            return
        self._presenter.show_usage(format_large_number(total))

    def unload_warning(self) -> str | None:
        """Advisory message for leaving while a request is outstanding."""

        return UNLOAD_WARNING if self._machine.submitting else None

    async def _run(self, request: PendingRequest) -> bool:
        self._presenter.show_loading(True)
        self._render_controls()
        try:
            formatted = await self._api.format(request.text, request.tone.value)
        except ClientError as exc:
            logger.info("Format failed", extra={"category": exc.category.value})
            self._machine.fail()
            self._presenter.show_loading(False)
            self._render_controls()
            self._presenter.show_error(error_message(exc), retryable=True)
            return False

        self._machine.succeed()
        self._presenter.show_loading(False)
        self.set_text(formatted)
        self._presenter.show_success(request.tone.value)
        await self.refresh_usage()
        return True

    def _reset_input(self) -> None:
        self._text = ""
        self._presenter.show_text("")
        self._render_controls()
        self._drafts.clear()

    def _render_controls(self) -> None:
        length = utf16_length(self._text)
        self._presenter.show_char_count(length, char_counter_tier(length, self._max_length))
        self._presenter.set_controls_enabled(
            can_format(self._text, self._machine.submitting, self._max_length)
        )
