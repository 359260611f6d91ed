"""Application settings loaded from environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_STATIC_DIR = Path(__file__).resolve().parent / "static"


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    groq_api_key: str | None = Field(default=None, alias="GROQ_API_KEY")
    rewrite_base_url: str = Field(
        default="https://api.groq.com/openai/v1", alias="REWRITE_BASE_URL"
    )
    rewrite_model: str = Field(
        default="meta-llama/llama-4-scout-17b-16e-instruct", alias="REWRITE_MODEL"
    )
    rewrite_temperature: float = Field(default=0.3, alias="REWRITE_TEMPERATURE")
    rewrite_max_tokens: int = Field(default=512, alias="REWRITE_MAX_TOKENS")
    rewrite_timeout: float = Field(default=30.0, alias="REWRITE_TIMEOUT", description="Seconds")
    max_text_length: int = Field(default=10_000, alias="MAX_TEXT_LENGTH")
    redact_pii: bool = Field(default=False, alias="REDACT_PII")
    usage_stats_file: Path = Field(default=Path("usage-stats.json"), alias="USAGE_STATS_FILE")
    static_dir: Path = Field(default=PACKAGE_STATIC_DIR, alias="STATIC_DIR")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def has_api_key(self) -> bool:
        return bool(self.groq_api_key and self.groq_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()
