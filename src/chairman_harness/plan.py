"""Pydantic schema for the cabal build plan (``plan.json``).

Only the fields needed to locate built executables are modelled; every other
key in the plan is ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chairman_harness.errors import PlanDecodeError, PlanReadError

logger = logging.getLogger(__name__)


class PlanComponent(BaseModel):
    """A single entry of the plan's ``install-plan`` list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    component_name: str | None = Field(default=None, alias="component-name")
    bin_file: str | None = Field(default=None, alias="bin-file")


class BuildPlan(BaseModel):
    """Top-level build plan document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    install_plan: list[PlanComponent] = Field(alias="install-plan")


def decode_plan(contents: bytes | str) -> BuildPlan:
    """Decode build plan JSON.

    Raises:
        PlanDecodeError: If the contents are not valid JSON or do not match
            the plan schema.
    """
    try:
        return BuildPlan.model_validate_json(contents)
    except ValidationError as e:
        raise PlanDecodeError(f"Cannot decode plan: {e}") from e


def load_plan(path: Path) -> BuildPlan:
    """Read and decode the build plan at ``path``.

    Raises:
        PlanReadError: If the file cannot be read.
        PlanDecodeError: If the file is not a valid build plan.
    """
    try:
        contents = path.read_bytes()
    except OSError as e:
        raise PlanReadError(f"Cannot read plan {path}: {e}") from e

    logger.debug("Loaded build plan from %s (%d bytes)", path, len(contents))
    return decode_plan(contents)


def find_component(plan: BuildPlan, package: str) -> PlanComponent | None:
    """Return the first ``exe:<package>`` component of the plan, if any."""
    wanted = f"exe:{package}"
    for component in plan.install_plan:
        if component.component_name == wanted:
            return component
    return None


__all__ = [
    "PlanComponent",
    "BuildPlan",
    "decode_plan",
    "load_plan",
    "find_component",
]
