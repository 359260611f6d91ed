"""Local draft persistence for crash recovery."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from tone_formatter.client.state import DRAFT_KEY

logger = logging.getLogger(__name__)


class DraftStorage(Protocol):
    """Single-value store keyed by ``DRAFT_KEY``."""

    def load(self) -> str | None: ...

    def save(self, text: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryDraftStorage:
    def __init__(self, text: str | None = None) -> None:
        self.values: dict[str, str] = {}
        if text is not None:
            self.values[DRAFT_KEY] = text

    def load(self) -> str | None:
        return self.values.get(DRAFT_KEY)

    def save(self, text: str) -> None:
        self.values[DRAFT_KEY] = text

    def clear(self) -> None:
        self.values.pop(DRAFT_KEY, None)


class JsonFileDraftStorage:
    """Key/value JSON file standing in for browser local storage.

    Storage problems never interrupt editing: they are logged and ignored.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def load(self) -> str | None:
        try:
            values = self._read()
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Could not load draft", extra={"error_type": type(exc).__name__})
            return None
        value = values.get(DRAFT_KEY)
        return value if isinstance(value, str) else None

    def save(self, text: str) -> None:
        self._update(text)

    def clear(self) -> None:
        self._update(None)

    def _read(self) -> dict:
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("draft file does not hold an object")
        return data

    def _update(self, text: str | None) -> None:
        try:
            try:
                values = self._read()
            except (FileNotFoundError, ValueError):
                values = {}
            if text is None:
                values.pop(DRAFT_KEY, None)
            else:
                values[DRAFT_KEY] = text
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(values), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save draft", extra={"error_type": type(exc).__name__})
