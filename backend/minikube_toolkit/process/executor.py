"""
Process Executor

Runs external commands asynchronously with an augmented environment,
optional privilege elevation and cancellation support. Failures surface
as ExternalProcessError carrying stderr; cancellation as
ExecutionCancelledError.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from minikube_toolkit.core.exceptions import ExecutionCancelledError, ExternalProcessError
from minikube_toolkit.process.cancellation import CancellationToken
from minikube_toolkit.system import PlatformSupport, get_platform

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of a successful command"""

    command: str
    args: list[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


def build_environment(env: dict[str, str | None] | None) -> dict[str, str]:
    """Inherited process environment with overrides applied (None removes a key)."""
    merged = dict(os.environ)
    for key, value in (env or {}).items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class ProcessExecutor:
    """
    Async command runner

    Example:
        executor = ProcessExecutor()
        result = await executor.exec("minikube", ["version", "--short"])
        print(result.stdout)
    """

    def __init__(self, platform: PlatformSupport | None = None):
        self.platform = platform or get_platform()

    async def exec(
        self,
        command: str,
        args: list[str] | None = None,
        *,
        env: dict[str, str | None] | None = None,
        task_logger: "ITaskLogger | None" = None,
        token: CancellationToken | None = None,
        elevate: bool = False,
        cwd: str | None = None,
    ) -> RunResult:
        """
        Run a command to completion

        Args:
            command: Executable name or path
            args: Argument vector
            env: Variables layered over the inherited environment
            task_logger: Host logger receiving the command output
            token: Cancellation token; cancelling terminates the process tree
            elevate: Run with administrator privileges
            cwd: Working directory

        Returns:
            RunResult with decoded stdout/stderr

        Raises:
            ExternalProcessError: Non-zero exit or spawn failure
            ExecutionCancelledError: Token cancelled before completion
        """
        args = list(args or [])
        run_command, run_args = (command, args)
        if elevate:
            run_command, run_args = self.platform.elevate_command(command, args)

        if token is not None and token.is_cancellation_requested:
            raise ExecutionCancelledError()

        logger.debug(f"Running: {run_command} {' '.join(run_args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                run_command,
                *run_args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=build_environment(env),
                cwd=cwd,
                creationflags=self.platform.creation_flags,
            )
        except OSError as e:
            raise ExternalProcessError(
                f"Failed to execute {command}: {e}",
                command=command,
                args=args,
                stderr=str(e),
            ) from e

        communicate = asyncio.ensure_future(process.communicate())
        cancelled = asyncio.ensure_future(token.wait()) if token is not None else None
        try:
            waiters = {communicate} if cancelled is None else {communicate, cancelled}
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

            if not communicate.done():
                logger.info(f"Cancelling {command} (pid {process.pid})")
                await asyncio.to_thread(self.platform.kill_process_tree, process.pid)
                await asyncio.wait({communicate})
                raise ExecutionCancelledError()

            stdout_bytes, stderr_bytes = communicate.result()
        except asyncio.CancelledError:
            if process.returncode is None:
                await asyncio.to_thread(self.platform.kill_process_tree, process.pid)
            raise
        finally:
            if cancelled is not None and not cancelled.done():
                cancelled.cancel()

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if task_logger is not None:
            for line in stdout.splitlines():
                task_logger.log(line)
            for line in stderr.splitlines():
                task_logger.warn(line)

        if process.returncode != 0:
            detail = stderr.strip() or stdout.strip()
            raise ExternalProcessError(
                f"Command '{command} {' '.join(args)}' failed with exit code {process.returncode}: {detail}",
                command=command,
                args=args,
                returncode=process.returncode,
                stderr=stderr,
            )

        return RunResult(command=command, args=args, stdout=stdout, stderr=stderr, returncode=0)
