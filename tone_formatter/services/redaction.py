"""Masking of personally identifying patterns before text leaves the service."""

import re

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})")
SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

EMAIL_PLACEHOLDER = "[EMAIL_REDACTED]"
PHONE_PLACEHOLDER = "[PHONE_REDACTED]"
SSN_PLACEHOLDER = "[SSN_REDACTED]"


def redact_pii(text: str) -> str:
    """Replace e-mail addresses, phone numbers and SSN-like numbers."""

    if not text:
        return text

    redacted = EMAIL_PATTERN.sub(EMAIL_PLACEHOLDER, text)
    redacted = PHONE_PATTERN.sub(PHONE_PLACEHOLDER, redacted)
    return SSN_PATTERN.sub(SSN_PLACEHOLDER, redacted)
