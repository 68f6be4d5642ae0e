"""
Error types for task submission and streaming.

Every message is redacted on construction so bearer tokens echoed back by a
server or an HTTP library never reach logs or the workflow failure channel:
- Stream connection failures with status code and body
- Transport-level failures (DNS, refused connections, broken streams)
- Submission rejections
- Configuration problems
"""

from __future__ import annotations

from .sanitize import redact_credentials


class TaskStreamError(Exception):
    """Base error; the message is always credential-safe."""

    def __init__(self, message: str):
        super().__init__(redact_credentials(message))

    @property
    def message(self) -> str:
        return str(self)


class StreamConnectionError(TaskStreamError):
    """The stream endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = redact_credentials(body)


class TransportError(TaskStreamError):
    """Network-level failure while talking to the API."""
    pass


class SubmissionError(TaskStreamError):
    """Task submission was rejected or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(TaskStreamError, ValueError):
    """Missing or invalid configuration input."""
    pass
