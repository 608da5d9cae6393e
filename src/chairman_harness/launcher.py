"""Launch child processes with tracked lifecycle.

This module handles:
    - Async process spawning with asyncio.create_subprocess_exec/_shell
    - Stream redirection for stdin/stdout/stderr
    - Annotation of the working directory and command line
    - Registration of process cleanup on the integration's resource scope
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Union

from chairman_harness.integration import Integration
from chairman_harness.scope import ReleaseKey

logger = logging.getLogger(__name__)

# Seconds a terminated child gets to exit before it is killed
CLEANUP_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class RawCommand:
    """An executable and its argv, launched without a shell."""

    executable: str
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class ShellCommand:
    """An opaque command string run by the system shell."""

    command: str


CommandSpec = Union[RawCommand, ShellCommand]


class StreamMode(str, Enum):
    """Redirection of a standard stream of the child process."""

    INHERIT = "inherit"
    PIPE = "pipe"
    DEVNULL = "devnull"


_STREAM_TARGETS = {
    StreamMode.INHERIT: None,
    StreamMode.PIPE: asyncio.subprocess.PIPE,
    StreamMode.DEVNULL: asyncio.subprocess.DEVNULL,
}


@dataclass(frozen=True)
class ProcessConfig:
    """How to create a process: command, working directory and streams."""

    command: CommandSpec
    cwd: str | Path | None = None
    env: dict[str, str] | None = field(default=None, hash=False)
    stdin: StreamMode = StreamMode.INHERIT
    stdout: StreamMode = StreamMode.INHERIT
    stderr: StreamMode = StreamMode.INHERIT


@dataclass
class LaunchedProcess:
    """Handles to a running child process.

    Attributes:
        stdin: Writer for the child's stdin, if piped.
        stdout: Reader for the child's stdout, if piped.
        stderr: Reader for the child's stderr, if piped.
        process: The asyncio process handle.
        release_key: Key of the registered cleanup action.
    """

    stdin: asyncio.StreamWriter | None
    stdout: asyncio.StreamReader | None
    stderr: asyncio.StreamReader | None
    process: asyncio.subprocess.Process
    release_key: ReleaseKey

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> int | None:
        return self.process.returncode


def command_line(command: CommandSpec) -> str:
    """Render a command for annotation (arguments are not quoted)."""
    if isinstance(command, RawCommand):
        return command.executable + " " + " ".join(command.arguments)
    return command.command


async def _spawn(config: ProcessConfig) -> asyncio.subprocess.Process:
    kwargs = {
        "cwd": None if config.cwd is None else str(config.cwd),
        "env": config.env,
        "stdin": _STREAM_TARGETS[config.stdin],
        "stdout": _STREAM_TARGETS[config.stdout],
        "stderr": _STREAM_TARGETS[config.stderr],
    }
    command = config.command
    if isinstance(command, RawCommand):
        return await asyncio.create_subprocess_exec(
            command.executable, *command.arguments, **kwargs
        )
    return await asyncio.create_subprocess_shell(command.command, **kwargs)


async def cleanup_process(process: asyncio.subprocess.Process) -> None:
    """Close the child's stdin and make sure the child is reaped.

    A child that is still running is terminated, since the event loop cannot
    close its transports while the process is alive. Safe to call more than
    once.
    """
    if process.stdin is not None and not process.stdin.is_closing():
        process.stdin.close()

    if process.returncode is None:
        logger.debug("Terminating process %s during cleanup", process.pid)
        try:
            process.terminate()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(process.wait(), CLEANUP_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(
                "Process %s ignored terminate, killing it", process.pid
            )
            _kill(process)
        except asyncio.CancelledError:
            # Cancelled mid-grace: the child must still not outlive cleanup
            _kill(process)
            await process.wait()
            raise
    await process.wait()


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def create_process(
    integration: Integration, config: ProcessConfig
) -> LaunchedProcess:
    """Create a process returning its stream handles and process handle.

    Cleanup of the process is registered on ``integration.scope`` before
    this function returns.

    Args:
        integration: The current test's integration context.
        config: The process to create.

    Returns:
        Handles to the launched process and the cleanup release key.

    Raises:
        OSError: If the operating system refuses to create the process.
        RuntimeError: If the integration's scope is already closed.
    """
    if integration.scope.closed:
        raise RuntimeError("Cannot launch a process on a closed scope")

    cwd = None if config.cwd is None else str(config.cwd)
    integration.annotate(f"CWD: {cwd!r}")
    integration.annotate(f"Command line: {command_line(config.command)}")

    process = await _spawn(config)
    try:
        release_key = integration.scope.register(partial(cleanup_process, process))
    except BaseException:
        # Scope closed while the child was spawning
        await cleanup_process(process)
        raise
    logger.debug("Started process %s", process.pid)

    return LaunchedProcess(
        stdin=process.stdin,
        stdout=process.stdout,
        stderr=process.stderr,
        process=process,
        release_key=release_key,
    )


__all__ = [
    "RawCommand",
    "ShellCommand",
    "CommandSpec",
    "StreamMode",
    "ProcessConfig",
    "LaunchedProcess",
    "command_line",
    "cleanup_process",
    "create_process",
]
