"""Task submission against the public REST API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from .config import ActionSettings
from .exceptions import SubmissionError, TransportError
from .logging_utils import log_operation

logger = structlog.get_logger(__name__)


class TaskSubmissionResponse(BaseModel):
    """Body returned by ``POST /v1/tasks``."""
    model_config = ConfigDict(extra="ignore")

    task_id: str | None = None
    error: str | None = None


def build_task_payload(settings: ActionSettings, task_type: str = "exec") -> dict[str, Any]:
    """Build the JSON body for a task submission."""
    payload: dict[str, Any] = {
        "prompt": settings.prompt,
        "repository": settings.repository,
        "github_token": settings.github_token,
    }
    if settings.repository:
        payload["repo_url"] = f"https://github.com/{settings.repository}"

    return {
        "type": task_type,
        "payload": payload,
        "timeout_seconds": settings.timeout_seconds,
    }


@log_operation("submit_task")
async def submit_task(
    client: httpx.AsyncClient,
    settings: ActionSettings,
    task_type: str = "exec",
) -> str:
    """Submit a task and return its identifier.

    Raises:
        SubmissionError: The API rejected the task or omitted the task id.
        TransportError: The request never got a response.
    """
    body = build_task_payload(settings, task_type)
    logger.debug(
        "Task submission payload",
        payload={
            **body,
            "payload": {**body["payload"], "github_token": "***"},
        },
    )

    try:
        response = await client.post(f"{settings.api_url}/v1/tasks", json=body)
    except httpx.HTTPError as e:
        raise TransportError(f"Task submission request failed: {e!s}") from e

    try:
        result = TaskSubmissionResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        result = TaskSubmissionResponse()

    if not response.is_success:
        raise SubmissionError(
            f"Task submission failed ({response.status_code}): "
            f"{result.error or 'Unknown error'}",
            status_code=response.status_code,
        )

    if not result.task_id:
        raise SubmissionError(
            "Invalid response from API: missing task_id",
            status_code=response.status_code,
        )

    return result.task_id
