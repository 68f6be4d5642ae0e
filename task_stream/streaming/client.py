"""
Stream orchestrator: opens the task event stream and drives the parser.

The deadline is an ``asyncio.timeout`` armed when the call starts. When it
fires, the pending read is cancelled, the response is closed by its context
manager and the caller gets a ``timeout`` result instead of an exception.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import structlog

from ..exceptions import StreamConnectionError, TransportError
from .models import UNKNOWN_ERROR, StreamResult, StreamState, StreamStatus
from .parser import SSELineDecoder, parse_sse_lines

DEFAULT_CONNECT_TIMEOUT = 30.0

logger = structlog.get_logger(__name__)


async def stream_task_output(
    url: str,
    api_key: str,
    timeout: float,
    *,
    client: httpx.AsyncClient | None = None,
) -> StreamResult:
    """
    Stream task output until a terminal event, end of stream or timeout.

    Args:
        url: Task stream endpoint
        api_key: Bearer credential for the API
        timeout: Overall deadline in seconds
        client: Optional shared client; one is created and closed otherwise

    Returns:
        The final StreamResult

    Raises:
        StreamConnectionError: The endpoint answered with a non-success status
        TransportError: Network-level failure before the deadline
    """
    owns_client = client is None
    if client is None:
        # The overall deadline bounds reads; only connecting gets its own limit
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(DEFAULT_CONNECT_TIMEOUT, read=None)
        )

    state = StreamState()
    try:
        async with asyncio.timeout(timeout) as deadline:
            return await _read_stream(client, url, api_key, state)
    except TimeoutError:
        if not deadline.expired():
            raise
        logger.warning("Task stream timed out", timeout_seconds=timeout)
        return StreamResult(
            status=StreamStatus.TIMEOUT,
            error=f"Task execution exceeded timeout ({timeout}s)",
        )
    finally:
        if owns_client:
            await client.aclose()


async def _read_stream(
    client: httpx.AsyncClient, url: str, api_key: str, state: StreamState
) -> StreamResult:
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Accept": "text/event-stream",
    }

    try:
        async with client.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                await response.aread()
                error_text = response.text
                raise StreamConnectionError(
                    f"SSE connection failed ({response.status_code}): {error_text}",
                    status_code=response.status_code,
                    body=error_text,
                )

            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                return await _degraded_result(response, state)

            decoder = SSELineDecoder()
            buffer = ""
            async for text in response.aiter_text():
                buffer = parse_sse_lines(buffer + text, state, decoder)
                if state.is_terminal:
                    break

            if not state.is_terminal:
                logger.debug(
                    "Stream ended without terminal event",
                    status=state.status.value,
                )
            return state.to_result()

    except httpx.HTTPError as e:
        error = TransportError(f"SSE stream failed: {e!s}")
        logger.error("HTTP error during streaming", error_message=str(error))
        raise error from e


async def _degraded_result(
    response: httpx.Response, state: StreamState
) -> StreamResult:
    """Handle a plain JSON answer sent instead of an event stream."""
    await response.aread()
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Unparsable JSON response from stream endpoint")
        return state.to_result()

    error = payload.get("error") if isinstance(payload, dict) else None
    if not error:
        logger.warning("JSON response from stream endpoint carried no error")
        return state.to_result()

    message = error.get("message") if isinstance(error, dict) else error
    return StreamResult(
        status=StreamStatus.FAILED,
        error=str(message) if message else UNKNOWN_ERROR,
    )
