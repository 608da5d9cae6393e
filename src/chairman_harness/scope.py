"""Scoped resource release.

A :class:`ResourceScope` collects cleanup actions and guarantees each one runs
exactly once: either when it is released early through its
:class:`ReleaseKey`, or when the scope closes. Closing runs the remaining
actions in reverse registration order, whether the scope exits normally or
through an exception.

Usage:
    async with ResourceScope() as scope:
        key = scope.register(lambda: handle.close())
        ...
        await scope.release(key)  # optional, early release
"""

from __future__ import annotations

import inspect
import itertools
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)

CleanupAction = Callable[[], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class ReleaseKey:
    """Identifies one registered cleanup action."""

    id: int


class ResourceScope:
    """Registry of cleanup actions bound to an ``async with`` block."""

    def __init__(self) -> None:
        self._actions: dict[ReleaseKey, CleanupAction] = {}
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, action: CleanupAction) -> ReleaseKey:
        """Register a cleanup action and return its release key.

        Raises:
            RuntimeError: If the scope is already closed.
        """
        if self._closed:
            raise RuntimeError("Cannot register cleanup on a closed scope")
        key = ReleaseKey(next(self._ids))
        self._actions[key] = action
        return key

    def is_registered(self, key: ReleaseKey) -> bool:
        return key in self._actions

    async def release(self, key: ReleaseKey) -> bool:
        """Run the action for ``key`` now.

        Returns:
            True if the action ran, False if it had already been released.
        """
        action = self._actions.pop(key, None)
        if action is None:
            return False
        await _run(action)
        return True

    async def close(self) -> None:
        """Run all remaining actions, most recent first.

        Every action runs even if an earlier one fails or the closing task is
        cancelled; the first failure (or the cancellation) is re-raised once
        all actions have run.
        """
        self._closed = True
        first_error: BaseException | None = None
        while self._actions:
            key = next(reversed(self._actions))
            action = self._actions.pop(key)
            try:
                await _run(action)
            except BaseException as e:
                logger.warning("Cleanup action %s failed: %s", key.id, e)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    async def __aenter__(self) -> "ResourceScope":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await self.close()
        except Exception:
            if exc is None:
                raise
            # The in-flight exception takes precedence; the cleanup failure
            # has already been logged.


async def _run(action: CleanupAction) -> None:
    result = action()
    if inspect.isawaitable(result):
        await result


__all__ = ["CleanupAction", "ReleaseKey", "ResourceScope"]
