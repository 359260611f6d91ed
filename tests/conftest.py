"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "test")

from tone_formatter.config import Settings, get_settings  # noqa: E402
from tone_formatter.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Ensure required environment variables are present during tests."""

    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("USAGE_STATS_FILE", str(tmp_path / "usage-stats.json"))
    monkeypatch.delenv("REDACT_PII", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def usage_file(tmp_path: Path) -> Path:
    return tmp_path / "usage-stats.json"


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def app():
    return create_app()
