"""
Entry point: submit a task, stream its output and report the outcome.
"""

from __future__ import annotations

import asyncio
import sys
import time

import httpx
import structlog

from .config import Configuration
from .exceptions import ConfigurationError
from .logging_utils import classify_error, configure_logging, operation_context
from .outputs import ActionOutputs
from .sanitize import redact_credentials
from .streaming import StreamResult, StreamStatus, stream_task_output
from .submission import submit_task

logger = structlog.get_logger(__name__)


async def run(
    config: Configuration | None = None,
    outputs: ActionOutputs | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> StreamResult | None:
    """Run one task end to end; failures are reported through outputs."""
    outputs = outputs or ActionOutputs()

    try:
        config = config or Configuration()
        settings = config.get_action_settings()
        api_config = config.get_api_config()
        task_config = config.get_task_config()

        logger.info(f"Submitting task to vibectl API: {settings.api_url}")
        logger.info(f"Timeout: {settings.timeout_seconds}s (streaming mode)")

        async with httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
                "User-Agent": api_config["user_agent"],
            },
            timeout=httpx.Timeout(api_config["connect_timeout"], read=None),
            transport=transport,
        ) as client:
            task_id = await submit_task(client, settings, task_config["type"])
            logger.info(f"Task submitted successfully. Task ID: {task_id}")
            outputs.set_output("task-id", task_id)

            start_time = time.perf_counter()
            logger.info("Connecting to SSE stream for real-time output...")

            stream_url = f"{settings.api_url}/v1/tasks/{task_id}/stream"
            async with operation_context("stream_task_output", context={"task_id": task_id}):
                result = await stream_task_output(
                    stream_url,
                    settings.api_key,
                    settings.stream_timeout,
                    client=client,
                )

        duration_ms = round((time.perf_counter() - start_time) * 1000)
        report_result(result, duration_ms, outputs)
        return result

    except Exception as e:
        message = redact_credentials(str(e))
        logger.error(
            "Task run failed",
            error_type=type(e).__name__,
            error_category=classify_error(e),
            error_message=message,
        )
        outputs.set_failed(message)
        return None


def report_result(result: StreamResult, duration_ms: int, outputs: ActionOutputs) -> None:
    """Map a StreamResult onto step outputs and the failure signal."""
    outputs.set_output("result", result.status.value)
    outputs.set_output("duration-ms", str(duration_ms))

    if result.output:
        outputs.set_output("output", result.output)

    if result.cost_usd is not None:
        outputs.set_output("cost-usd", str(result.cost_usd))

    match result.status:
        case StreamStatus.FAILED:
            outputs.set_failed(f"Task execution failed: {result.error or 'Unknown error'}")
        case StreamStatus.COMPLETED:
            logger.info(f"Task completed successfully in {duration_ms}ms")
        case _:
            logger.warning(
                f"Task finished with status '{result.status.value}' after {duration_ms}ms",
                error=result.error,
            )


def main() -> int:
    """Main entry point for the console script."""
    outputs = ActionOutputs()
    try:
        config = Configuration()
    except ConfigurationError as e:
        outputs.set_failed(str(e))
        return outputs.exit_code

    logging_config = config.get_logging_config()
    configure_logging(logging_config["level"], colors=logging_config["colors"])

    asyncio.run(run(config, outputs))
    return outputs.exit_code


if __name__ == "__main__":
    sys.exit(main())
