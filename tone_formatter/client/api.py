"""HTTP client for the tone formatter service."""

from __future__ import annotations

import json
import logging

import httpx

from tone_formatter.exceptions import ClientError, ErrorCategory

logger = logging.getLogger(__name__)

ERROR_CATEGORY_HEADER = "X-Error-Category"


class ToneFormatterClient:
    """Calls ``/api/format`` and ``/api/usage`` on a shared AsyncClient.

    The AsyncClient is expected to carry the service ``base_url``.
    """

    def __init__(self, client: httpx.AsyncClient, prefix: str = "/api") -> None:
        self._client = client
        self._prefix = prefix.rstrip("/")

    async def format(self, text: str, tone: str) -> str:
        """Return the rewritten text or raise a tagged ``ClientError``."""

        response = await self._request(
            "POST",
            "/format",
            content=json.dumps({"text": text, "tone": tone}),
            headers={"Content-Type": "application/json"},
        )
        data = _json_or_empty(response)
        formatted = data.get("formattedText")
        if not isinstance(formatted, str) or not formatted:
            raise ClientError("Invalid response from server", category=ErrorCategory.UPSTREAM)
        return formatted

    async def usage(self) -> int:
        response = await self._request("GET", "/usage")
        total = _json_or_empty(response).get("totalUsage")
        if not isinstance(total, int):
            raise ClientError("Invalid response from server", category=ErrorCategory.UPSTREAM)
        return total

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        try:
            response = await self._client.request(method, f"{self._prefix}{path}", **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Request timed out", extra={"path": path})
            raise ClientError("Request timed out", category=ErrorCategory.TIMEOUT) from exc
        except httpx.HTTPError as exc:
            logger.warning("Network error", extra={"path": path, "error_type": type(exc).__name__})
            raise ClientError("Network error", category=ErrorCategory.NETWORK) from exc

        if response.is_success:
            return response

        message = _json_or_empty(response).get("error")
        if not isinstance(message, str) or not message:
            message = f"Server error: {response.status_code}"
        raise ClientError(
            message,
            category=_category_from(response),
            status_code=response.status_code,
        )


def _category_from(response: httpx.Response) -> ErrorCategory:
    try:
        return ErrorCategory(response.headers.get(ERROR_CATEGORY_HEADER, ""))
    except ValueError:
        return ErrorCategory.UNKNOWN


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
