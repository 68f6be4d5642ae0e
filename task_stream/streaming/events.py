"""
Stream state machine: folds decoded SSE events into a StreamState.

Unknown event types and unparsable payloads are logged and skipped rather
than treated as failures, so a newer server protocol or one bad chunk never
aborts an otherwise healthy task stream.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from .models import UNKNOWN_ERROR, StreamState, StreamStatus

logger = structlog.get_logger(__name__)


def process_sse_event(
    event_type: str,
    raw_data: str,
    state: StreamState,
    log: Any = None,
) -> None:
    """Apply one event to state and report it on the observation channel."""
    log = log or logger

    try:
        event = json.loads(raw_data)
    except json.JSONDecodeError:
        log.debug("Failed to parse SSE data", raw_data=raw_data)
        return

    if not isinstance(event, dict):
        log.debug("Ignoring non-object SSE data", raw_data=raw_data)
        return

    if state.is_terminal:
        log.debug(
            "Ignoring event after terminal status",
            event_type=event_type,
            status=state.status.value,
        )
        return

    match event_type:
        case "start":
            log.info("[Stream] Task execution started")

        case "stdout":
            text = event.get("data")
            if isinstance(text, str) and text:
                log.info(text)
                state.output_buffer += text

        case "stderr":
            text = event.get("data")
            if isinstance(text, str) and text:
                log.warning(f"[stderr] {text}")

        case "complete":
            state.status = StreamStatus.COMPLETED
            log.info("[Stream] Task completed")
            cost = event.get("costUsd")
            if _is_number(cost) and state.cost_usd is None:
                state.cost_usd = float(cost)

        case "error":
            state.status = StreamStatus.FAILED
            error = event.get("error")
            state.error = str(error) if error else UNKNOWN_ERROR
            log.error(f"[Stream] Task failed: {state.error}")

        case _:
            log.debug("Unknown event type", event_type=event_type)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)
