"""Process-wide usage counter with a pluggable persistence port."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from tone_formatter.models import UsageCounter

logger = logging.getLogger(__name__)


class UsagePersistence(Protocol):
    """Durable storage for the usage counter."""

    def load(self) -> UsageCounter:
        """Return the stored counter.

        Raises whatever the backing store raises when the data is missing or
        unreadable; ``UsageStore`` treats any such failure as zero.
        """
        ...

    def save(self, counter: UsageCounter) -> None:
        """Persist the full counter state."""
        ...


class JsonFileUsagePersistence:
    """Stores the counter as ``{"totalCalls": N}`` in a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UsageCounter:
        raw = self._path.read_text(encoding="utf-8")
        return UsageCounter.model_validate(json.loads(raw))

    def save(self, counter: UsageCounter) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = counter.model_dump(by_alias=True)
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


class InMemoryUsagePersistence:
    """Keeps the last saved counter in memory. Useful for tests."""

    def __init__(self, initial: UsageCounter | None = None) -> None:
        self.saved: UsageCounter | None = initial
        self.save_calls = 0

    def load(self) -> UsageCounter:
        if self.saved is None:
            raise FileNotFoundError("no counter saved")
        return self.saved.model_copy()

    def save(self, counter: UsageCounter) -> None:
        self.save_calls += 1
        self.saved = counter.model_copy()


class UsageStore:
    """Counts accepted format requests and flushes after every increment."""

    def __init__(self, persistence: UsagePersistence) -> None:
        self._persistence = persistence
        self._counter = UsageCounter()

    def load(self) -> int:
        """Read the persisted counter, starting from zero if it is unusable."""

        try:
            self._counter = self._persistence.load()
        except FileNotFoundError:
            logger.info("No usage stats found; starting with fresh usage stats")
            self._counter = UsageCounter()
        except (OSError, ValueError, TypeError, PydanticValidationError) as exc:
            logger.warning(
                "Could not read usage stats; starting with fresh usage stats",
                extra={"error_type": type(exc).__name__},
            )
            self._counter = UsageCounter()

        return self._counter.total_calls

    def increment(self) -> int:
        """Add one call and persist synchronously; persistence is best-effort."""

        self._counter = UsageCounter(total_calls=self._counter.total_calls + 1)
        try:
            self._persistence.save(self._counter)
        except OSError:
            logger.exception(
                "Could not save usage stats",
                extra={"total_calls": self._counter.total_calls},
            )
        return self._counter.total_calls

    def read(self) -> int:
        return self._counter.total_calls
