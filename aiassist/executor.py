"""
Command Runner
===============
Runs one approved shell command on the local host and captures its
combined stdout/stderr.

The command is passed to ``sh -c`` unmodified, so pipes, redirections
and quoting behave exactly as the model wrote them. A non-zero exit is
a normal outcome: the output is still returned so the model can
interpret it.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SHELL: str = "sh"

_DRAIN_TIMEOUT: float = 1.0


class ExecutionStatus(str, Enum):
    """Outcome of a command execution."""
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class ExecutionResult(BaseModel):
    """Captured result of one command."""
    command: str
    output: str = Field(default="", description="Combined stdout and stderr")
    exit_code: int | None = None
    status: ExecutionStatus = ExecutionStatus.SUCCESS
    message: str = ""

    @property
    def error(self) -> str | None:
        """Error description for non-successful runs, None otherwise."""
        if self.status == ExecutionStatus.SUCCESS:
            return None
        return self.message or f"exit status {self.exit_code}"


class CommandRunner:
    """Executes shell commands through ``sh -c``."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    async def execute(self, command: str) -> ExecutionResult:
        """
        Run ``command`` and wait for it to finish.

        Never raises for command failures; spawn errors and timeouts are
        reported through the result's status.
        """
        logger.info("Executing command: %s", command)

        try:
            process = await asyncio.create_subprocess_exec(
                SHELL, "-c", command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            logger.error("Failed to start '%s': %s", command, exc)
            return ExecutionResult(
                command=command,
                status=ExecutionStatus.ERROR,
                message=f"failed to start shell: {exc}",
            )

        try:
            stdout_bytes, _ = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            process.kill()
            try:
                # grandchildren may still hold the pipe open
                stdout_bytes, _ = await asyncio.wait_for(
                    process.communicate(), timeout=_DRAIN_TIMEOUT,
                )
            except asyncio.TimeoutError:
                stdout_bytes = b""
            logger.warning("Command timed out after %ss: %s", self._timeout, command)
            return ExecutionResult(
                command=command,
                output=stdout_bytes.decode("utf-8", errors="replace"),
                exit_code=process.returncode,
                status=ExecutionStatus.TIMEOUT,
                message=f"command timed out after {self._timeout}s",
            )

        output = stdout_bytes.decode("utf-8", errors="replace")
        exit_code = process.returncode if process.returncode is not None else 0

        if exit_code == 0:
            return ExecutionResult(command=command, output=output, exit_code=0)

        logger.info("Command exited with %d: %s", exit_code, command)
        return ExecutionResult(
            command=command,
            output=output,
            exit_code=exit_code,
            status=ExecutionStatus.ERROR,
            message=f"exit status {exit_code}",
        )
