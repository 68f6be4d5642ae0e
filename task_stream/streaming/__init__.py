"""
Streaming of task output over server-sent events.

This package contains:
- Line framing and SSE line decoding
- The stream state machine
- The stream orchestrator with timeout handling
"""

from __future__ import annotations

from .client import stream_task_output
from .events import process_sse_event
from .models import SSEEvent, StreamResult, StreamState, StreamStatus
from .parser import SSELineDecoder, parse_sse_lines, split_lines

__all__ = [
    "SSEEvent",
    "SSELineDecoder",
    "StreamResult",
    "StreamState",
    "StreamStatus",
    "parse_sse_lines",
    "process_sse_event",
    "split_lines",
    "stream_task_output",
]
