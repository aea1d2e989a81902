"""External command execution.

Commands are opaque shell command lines run in a project's working directory.
Output is forwarded to the log line by line while the child runs.
"""

import asyncio
import time
from typing import Protocol

import structlog

from webhook_deployer.core.exceptions import CommandFailedError, ProcessError
from webhook_deployer.models.deployment import CommandResult, DeploymentStep
from webhook_deployer.utils.logging import get_logger

DEFAULT_TIMEOUT_SECONDS = 300.0
READ_CHUNK_SIZE = 65536

logger = get_logger(__name__)


class CommandRunner(Protocol):
    """Runs one command to completion."""

    async def run(
        self,
        command: str,
        cwd: str,
        *,
        step: DeploymentStep,
        log: structlog.stdlib.BoundLogger | None = None,
        timeout: float | None = None,
    ) -> CommandResult: ...


class ShellCommandRunner:
    """Runs commands through the system shell with a fixed timeout."""

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        command: str,
        cwd: str,
        *,
        step: DeploymentStep,
        log: structlog.stdlib.BoundLogger | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run ``command`` in ``cwd`` and return its output on exit status 0.

        Raises:
            CommandFailedError: non-zero exit status
            ProcessError: the process could not start, hit the timeout or
                its output could not be read
        """
        log = (log or logger).bind(step=step.value, command=command)
        timeout = timeout if timeout is not None else self.timeout_seconds
        start_time = time.perf_counter()

        log.info("command.started", cwd=cwd)
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.error("command.start_failed", error=str(e))
            raise ProcessError(step.value, command, f"could not be started: {e}") from e

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        def emit(raw: bytes, sink: list[str], event: str) -> None:
            text = raw.decode("utf-8", errors="replace")
            sink.append(text)
            log.info(event, line=text.rstrip("\r\n"))

        async def pump(stream: asyncio.StreamReader, sink: list[str], event: str) -> None:
            # Fixed-size reads; a single line may be longer than the reader's limit
            pending = b""
            while True:
                chunk = await stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                pending += chunk
                *lines, pending = pending.split(b"\n")
                for line in lines:
                    emit(line + b"\n", sink, event)
            if pending:
                emit(pending, sink, event)

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    pump(process.stdout, stdout_lines, "command.stdout"),
                    pump(process.stderr, stderr_lines, "command.stderr"),
                    process.wait(),
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            log.error("command.timeout", timeout_seconds=timeout)
            await _kill(process)
            raise ProcessError(
                step.value, command, f"timed out after {timeout:g} seconds"
            ) from None
        except Exception as e:
            log.error("command.output_failed", error=str(e), exc_info=True)
            await _kill(process)
            raise ProcessError(step.value, command, f"failed while reading output: {e}") from e

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        stdout = "".join(stdout_lines)
        stderr = "".join(stderr_lines)
        exit_code = process.returncode if process.returncode is not None else -1

        log.info("command.finished", exit_code=exit_code, duration_ms=duration_ms)

        if exit_code != 0:
            raise CommandFailedError(step.value, command, exit_code, stderr.strip())

        return CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a child and reap it."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()
