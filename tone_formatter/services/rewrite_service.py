"""Adapter for an OpenAI-compatible chat completions endpoint (Groq by default)."""

from __future__ import annotations

import json
import logging

import httpx

from tone_formatter.config import Settings
from tone_formatter.exceptions import ConfigError, ErrorCategory, UpstreamError

logger = logging.getLogger(__name__)


class RewriteService:
    """Wrapper around the provider's chat completions endpoint."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    @property
    def endpoint(self) -> str:
        return f"{self._settings.rewrite_base_url.rstrip('/')}/chat/completions"

    async def rewrite(self, system_prompt: str, user_prompt: str) -> str:
        """Return the provider's single completion for the instruction pair."""

        if not self._settings.has_api_key:
            raise ConfigError("GROQ_API_KEY environment variable is not set")

        payload = {
            "model": self._settings.rewrite_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._settings.rewrite_temperature,
            "max_tokens": self._settings.rewrite_max_tokens,
        }

        headers = {
            "Authorization": f"Bearer {self._settings.groq_api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(
                self.endpoint,
                headers=headers,
                # ASCII-escaped so text holding half a surrogate pair still encodes.
                content=json.dumps(payload),
                timeout=self._settings.rewrite_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Rewrite request timed out", exc_info=exc)
            raise UpstreamError(
                "Rewrite service timed out", category=ErrorCategory.TIMEOUT
            ) from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(
                "Rewrite request failed",
                extra={
                    "status_code": status_code,
                    "response_text": exc.response.text,
                },
            )
            category = (
                ErrorCategory.RATE_LIMIT if status_code == 429 else ErrorCategory.UPSTREAM
            )
            raise UpstreamError(
                "Rewrite service returned an error",
                category=category,
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected rewrite HTTP error")
            raise UpstreamError(
                "Rewrite service request failed", category=ErrorCategory.NETWORK
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Rewrite response was not JSON")
            raise UpstreamError("Rewrite service returned an invalid response") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed rewrite response", extra={"raw_keys": _keys(data)})
            raise UpstreamError("Rewrite service returned an invalid response") from exc

        if not isinstance(content, str) or not content.strip():
            raise UpstreamError("Rewrite service returned an invalid response")

        return content.strip()


def _keys(data: object) -> list[str]:
    """Top-level keys of a payload; the body itself may echo user text."""

    if isinstance(data, dict):
        return sorted(str(key) for key in data)
    return []
