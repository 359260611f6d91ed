"""Pydantic models shared across application layers."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Tone(str, Enum):
    """Target register for rewritten text."""

    FORMAL = "formal"
    CASUAL = "casual"


class FormatRequest(BaseModel):
    """Incoming format payload.

    Fields are optional on purpose so the gateway produces the 400 messages
    instead of the framework's 422 response.
    """

    text: str | None = Field(default=None, description="Text to rewrite.")
    tone: str | None = Field(default=None, description="Either 'formal' or 'casual'.")


class FormatResponse(BaseModel):
    """Rewritten text returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    formatted_text: str = Field(alias="formattedText")


class UsageCounter(BaseModel):
    """Persisted process-wide usage counter."""

    model_config = ConfigDict(populate_by_name=True)

    total_calls: int = Field(default=0, ge=0, alias="totalCalls")


class UsageResponse(BaseModel):
    """Public usage statistics."""

    model_config = ConfigDict(populate_by_name=True)

    total_usage: int = Field(alias="totalUsage")
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    env: str


class ErrorResponse(BaseModel):
    """Error body returned to HTTP clients."""

    error: str
