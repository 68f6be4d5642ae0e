"""
Remote task submission with streamed output.

This package submits a task to the vibectl API and follows its progress
over a server-sent event stream:
- Incremental SSE line framing and decoding
- A terminal-state machine for task events
- Deadline-bounded streaming with credential-safe errors
- GitHub Actions inputs and outputs
"""

from __future__ import annotations

from .config import ActionSettings, Configuration
from .exceptions import (
    ConfigurationError,
    StreamConnectionError,
    SubmissionError,
    TaskStreamError,
    TransportError,
)
from .logging_utils import configure_logging
from .sanitize import redact_credentials
from .streaming import (
    SSEEvent,
    SSELineDecoder,
    StreamResult,
    StreamState,
    StreamStatus,
    parse_sse_lines,
    process_sse_event,
    stream_task_output,
)

__all__ = [
    # Configuration
    "ActionSettings",
    "Configuration",
    # Exceptions
    "ConfigurationError",
    # Streaming
    "SSEEvent",
    "SSELineDecoder",
    "StreamConnectionError",
    "StreamResult",
    "StreamState",
    "StreamStatus",
    "SubmissionError",
    "TaskStreamError",
    "TransportError",
    "configure_logging",
    "parse_sse_lines",
    "process_sse_event",
    "redact_credentials",
    "stream_task_output",
]
