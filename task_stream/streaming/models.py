"""
Streaming-specific dataclasses for task output streams.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

UNKNOWN_ERROR = "Unknown error"


class StreamStatus(Enum):
    """Outcome of a task stream."""
    UNKNOWN = "unknown"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        """Terminal statuses stop the read loop."""
        return self in (StreamStatus.COMPLETED, StreamStatus.FAILED)


@dataclass(frozen=True)
class SSEEvent:
    """One decoded ``event:``/``data:`` pair."""
    event_type: str
    raw_data: str


@dataclass(frozen=True)
class StreamResult:
    """Final, immutable outcome of one streamed task."""
    status: StreamStatus
    output: str | None = None
    cost_usd: float | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.status is StreamStatus.FAILED and self.error is None:
            raise ValueError("A failed StreamResult requires an error message")
        if self.status is StreamStatus.TIMEOUT and not self.error:
            raise ValueError("A timeout StreamResult requires an error message")

    def to_dict(self) -> dict[str, Any]:
        """Render the wire shape handed to the calling environment."""
        result: dict[str, Any] = {"status": self.status.value}
        if self.output is not None:
            result["output"] = self.output
        if self.cost_usd is not None:
            result["costUsd"] = self.cost_usd
        result["error"] = self.error
        return result


@dataclass
class StreamState:
    """Mutable accumulator owned by a single stream read loop."""
    output_buffer: str = ""
    status: StreamStatus = StreamStatus.UNKNOWN
    error: str | None = None
    cost_usd: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_result(self) -> StreamResult:
        """Freeze the accumulated state; empty output becomes None."""
        return StreamResult(
            status=self.status,
            output=self.output_buffer or None,
            cost_usd=self.cost_usd,
            error=self.error,
        )
