"""Wait for launched processes, with optional timeout.

Two outcomes are deliberately kept apart:
    - a cancelled unbounded wait yields ``None`` (no exit code known)
    - an expired bounded wait yields ``TimedOut()``

Neither kills the child; only the wait is abandoned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from chairman_harness.integration import Integration
from chairman_harness.launcher import LaunchedProcess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimedOut:
    """The deadline of a bounded wait elapsed before the process exited."""


WaitOutcome = Union[TimedOut, int, None]


async def wait_for_process_io(process: asyncio.subprocess.Process) -> int | None:
    """Wait for ``process`` to exit.

    Returns:
        The exit code, or None if this wait was cancelled.
    """
    try:
        return await process.wait()
    except asyncio.CancelledError:
        logger.debug("Wait for process %s was cancelled", process.pid)
        return None


async def wait_seconds_for_process_io(
    seconds: float, process: asyncio.subprocess.Process
) -> WaitOutcome:
    """Wait at most ``seconds`` for ``process`` to exit.

    The deadline timer and the exit wait run as separate tasks; the first
    to finish decides the result and the other is cancelled and awaited.

    Returns:
        ``TimedOut()`` if the deadline passed first, otherwise the result of
        :func:`wait_for_process_io`.
    """
    waiter = asyncio.ensure_future(wait_for_process_io(process))
    timer = asyncio.ensure_future(asyncio.sleep(seconds))
    try:
        done, _ = await asyncio.wait(
            {waiter, timer}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (waiter, timer):
            if not task.done():
                task.cancel()
        await asyncio.gather(waiter, timer, return_exceptions=True)

    if waiter in done:
        return waiter.result()
    return TimedOut()


async def wait_for_process(
    integration: Integration, launched: LaunchedProcess
) -> int | None:
    """Wait for a launched process to exit.

    Returns:
        The exit code, or None if the wait was cancelled.
    """
    return await wait_for_process_io(launched.process)


async def wait_seconds_for_process(
    integration: Integration, seconds: float, launched: LaunchedProcess
) -> WaitOutcome:
    """Wait at most ``seconds`` for a launched process, annotating the result.

    Args:
        integration: The current test's integration context.
        seconds: Wall-clock bound on the wait.
        launched: The process to wait for.

    Returns:
        ``TimedOut()``, the exit code, or None if no exit code is known.
    """
    result = await wait_seconds_for_process_io(seconds, launched.process)

    if isinstance(result, TimedOut):
        integration.annotate("Timed out waiting for process to exit")
    elif result is None:
        integration.annotate("No exit code for process")
    else:
        integration.annotate(f"Process exited {result}")
    return result


__all__ = [
    "TimedOut",
    "WaitOutcome",
    "wait_for_process_io",
    "wait_seconds_for_process_io",
    "wait_for_process",
    "wait_seconds_for_process",
]
