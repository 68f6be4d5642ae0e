"""
Reporting results back to the GitHub Actions runner.

Outputs go to the file named by ``GITHUB_OUTPUT`` in the multi-line
``name<<delimiter`` form; failures are printed as ``::error::`` workflow
commands and flip the exit code.
"""

from __future__ import annotations

import os
import sys
import uuid
from typing import TextIO

import structlog

from .sanitize import redact_credentials

logger = structlog.get_logger(__name__)


def escape_command_data(value: str) -> str:
    """Escape text for use inside a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionOutputs:
    """Collects step outputs and the failure signal for one run."""

    def __init__(self, output_path: str | None = None, stream: TextIO | None = None):
        self.output_path = output_path if output_path is not None else os.getenv("GITHUB_OUTPUT", "")
        self.stream = stream or sys.stdout
        self.exit_code = 0
        self.values: dict[str, str] = {}

    def set_output(self, name: str, value: str) -> None:
        """Record a step output."""
        self.values[name] = value

        if not self.output_path:
            logger.info("Output", name=name, value=value)
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in value:
            raise ValueError(f"Unexpected output delimiter collision for {name}")

        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def set_failed(self, message: str) -> None:
        """Mark the step as failed with a credential-safe message."""
        safe_message = redact_credentials(message)
        self.exit_code = 1
        self.stream.write(f"::error::{escape_command_data(safe_message)}\n")
        self.stream.flush()

    @property
    def failed(self) -> bool:
        return self.exit_code != 0
