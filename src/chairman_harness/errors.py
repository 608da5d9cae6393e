"""Exception taxonomy for the chairman integration harness.

Build-plan errors mean the build environment is broken and are never caught
inside the library. ``IntegrationFailure`` is the generic test-failure
signal raised by :meth:`Integration.fail_message`.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base exception for harness errors."""

    pass


class BuildPlanError(HarnessError):
    """Raised when a binary cannot be located through the build plan."""

    pass


class PlanReadError(BuildPlanError):
    """Raised when the build plan file cannot be read."""

    pass


class PlanDecodeError(BuildPlanError):
    """Raised when the build plan file is not a valid plan document."""

    pass


class ComponentNotFoundError(BuildPlanError):
    """Raised when no ``exe:<package>`` component exists in the plan."""

    def __init__(self, package: str):
        self.package = package
        super().__init__(f"Cannot find exe:{package} in plan")


class MissingBinFileError(BuildPlanError):
    """Raised when the matching component has no ``bin-file``."""

    def __init__(self, component: object):
        self.component = component
        super().__init__(f"missing bin-file in: {component!r}")


class HarnessConfigError(HarnessError):
    """Raised when the harness config file cannot be parsed or validated."""


class IntegrationFailure(AssertionError):
    """Fatal failure of the current integration test.

    Attributes:
        message: The failure report.
        location: ``file:line`` of the test code that triggered the failure.
        annotations: Annotations recorded before the failure.
    """

    def __init__(
        self,
        message: str,
        location: str | None = None,
        annotations: list[str] | None = None,
    ):
        self.message = message
        self.location = location
        self.annotations = list(annotations or [])
        super().__init__(self._render())

    def _render(self) -> str:
        lines = []
        if self.location:
            lines.append(f"Failure at {self.location}")
        lines.append(self.message)
        if self.annotations:
            lines.append("")
            lines.append("Annotations:")
            lines.extend(f"  {annotation}" for annotation in self.annotations)
        return "\n".join(lines)


__all__ = [
    "HarnessError",
    "BuildPlanError",
    "PlanReadError",
    "PlanDecodeError",
    "ComponentNotFoundError",
    "MissingBinFileError",
    "HarnessConfigError",
    "IntegrationFailure",
]
