"""
Line framing and SSE line decoding for task output streams.

Chunk boundaries never line up with SSE records, so the framer keeps the
trailing partial line as carry-over and the decoder keeps the pending event
type between calls. Both are permissive: unrecognized lines are dropped.
"""

from __future__ import annotations

from typing import Any

from .events import process_sse_event
from .models import SSEEvent, StreamState

EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "


class SSELineDecoder:
    """Pairs ``event:`` lines with the ``data:`` line that follows them."""

    def __init__(self) -> None:
        self.pending_event_type = ""

    def feed(self, line: str) -> SSEEvent | None:
        """Consume one line; return an event when a ``data:`` line completes one."""
        if line.startswith(EVENT_PREFIX):
            self.pending_event_type = line[len(EVENT_PREFIX):].strip()
            return None

        if line.startswith(DATA_PREFIX):
            event = SSEEvent(
                event_type=self.pending_event_type,
                raw_data=line[len(DATA_PREFIX):],
            )
            # A second data line without a new event line gets an empty type
            self.pending_event_type = ""
            return event

        return None


def split_lines(buffer: str) -> tuple[list[str], str]:
    """Split buffer into complete lines and the trailing carry-over fragment."""
    lines = buffer.split("\n")
    remainder = lines.pop()
    return lines, remainder


def parse_sse_lines(
    buffer: str,
    state: StreamState,
    decoder: SSELineDecoder | None = None,
    log: Any = None,
) -> str:
    """
    Dispatch every complete SSE line in buffer into state.

    Args:
        buffer: Carry-over from the previous call plus newly arrived text
        state: Accumulator updated by each decoded event
        decoder: Decoder holding the pending event type across calls; pass
            the same instance for the lifetime of one stream
        log: Optional bound logger for event observations

    Returns:
        The incomplete trailing fragment to prepend to the next arrival
    """
    if decoder is None:
        decoder = SSELineDecoder()

    lines, remainder = split_lines(buffer)
    for line in lines:
        event = decoder.feed(line)
        if event is not None:
            process_sse_event(event.event_type, event.raw_data, state, log=log)

    return remainder
