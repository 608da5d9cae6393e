"""Per-test integration context.

An :class:`Integration` is the diagnostic sink and resource owner for one
integration test. Annotations are kept in order and reported alongside any
failure; processes launched through it are cleaned up when the context
exits.

Example:
    async with Integration() as integration:
        launched = await create_process(integration, proc_node(args).proc())
        code = await wait_seconds_for_process(integration, 30, launched)
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from types import TracebackType
from typing import NoReturn

from chairman_harness.errors import IntegrationFailure
from chairman_harness.scope import ResourceScope

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parent


def call_site() -> str | None:
    """Return ``file:line`` of the innermost frame outside this package."""
    for frame in reversed(traceback.extract_stack()):
        if not Path(frame.filename).resolve().is_relative_to(_PACKAGE_DIR):
            return f"{frame.filename}:{frame.lineno}"
    return None


class Integration:
    """Annotation sink and resource scope for a single test."""

    def __init__(self, scope: ResourceScope | None = None):
        self.scope = scope if scope is not None else ResourceScope()
        self.annotations: list[str] = []

    def annotate(self, message: str) -> None:
        """Record a free-form diagnostic annotation."""
        self.annotations.append(message)
        logger.info(message)

    def fail_message(self, message: str) -> NoReturn:
        """Fail the current test with ``message``.

        The failure location is the test code that called into the harness,
        not the harness internals.

        Raises:
            IntegrationFailure: Always.
        """
        location = call_site()
        logger.error("Integration failure at %s", location or "<unknown>")
        raise IntegrationFailure(message, location, self.annotations)

    async def __aenter__(self) -> "Integration":
        await self.scope.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.scope.__aexit__(exc_type, exc, tb)


__all__ = ["Integration", "call_site"]
