"""Credential redaction for anything that leaves the process."""

from __future__ import annotations

import re

BEARER_PATTERN = re.compile(r"Bearer\s+\S+", re.IGNORECASE)
REDACTED_BEARER = "Bearer ***"


def redact_credentials(text: str) -> str:
    """Replace every ``Bearer <token>`` in text with ``Bearer ***``."""
    return BEARER_PATTERN.sub(REDACTED_BEARER, text)
