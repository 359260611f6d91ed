"""Presentation adapters for the client controller."""

from __future__ import annotations

import sys
from typing import Callable, Protocol, TextIO

from tone_formatter.client.state import MAX_TEXT_LENGTH, CounterTier


class Presenter(Protocol):
    """Everything the controller needs from a UI toolkit."""

    def show_text(self, text: str) -> None: ...

    def show_char_count(self, length: int, tier: CounterTier) -> None: ...

    def set_controls_enabled(self, enabled: bool) -> None: ...

    def show_loading(self, loading: bool) -> None: ...

    def show_success(self, tone: str) -> None: ...

    def show_error(self, message: str, retryable: bool) -> None: ...

    def hide_error(self) -> None: ...

    def show_usage(self, display: str) -> None: ...

    def confirm(self, prompt: str) -> bool: ...


class ConsolePresenter:
    """Line-oriented presenter for terminals."""

    _tier_marks = {CounterTier.LOW: "", CounterTier.MEDIUM: " (!)", CounterTier.HIGH: " (!!)"}

    def __init__(
        self,
        stream: TextIO | None = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self._stream = stream or sys.stdout
        self._prompt = prompt

    def show_text(self, text: str) -> None:
        self._write("----- text -----")
        self._write(text)
        self._write("----------------")

    def show_char_count(self, length: int, tier: CounterTier) -> None:
        self._write(f"{length:,} / {MAX_TEXT_LENGTH:,} characters{self._tier_marks[tier]}")

    def set_controls_enabled(self, enabled: bool) -> None:
        if not enabled:
            self._write("(formatting unavailable)")

    def show_loading(self, loading: bool) -> None:
        if loading:
            self._write("Formatting...")

    def show_success(self, tone: str) -> None:
        self._write(f"✓ Text formatted to be more {tone}")

    def show_error(self, message: str, retryable: bool) -> None:
        self._write(f"Error: {message}")
        if retryable:
            self._write("Type :retry to try again or :dismiss to close.")

    def hide_error(self) -> None:
        pass

    def show_usage(self, display: str) -> None:
        self._write(f"Texts formatted so far: {display}")

    def confirm(self, prompt: str) -> bool:
        answer = self._prompt(f"{prompt} [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    def _write(self, line: str) -> None:
        print(line, file=self._stream)
