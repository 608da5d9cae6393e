"""Resolve logical package names to executables.

A binary is either taken from an environment variable (nix-style deployment
where prebuilt binaries are exported) or looked up in the cabal build plan
(local ``dist-newstyle`` build). The choice is made once per call and kept
as an explicit :data:`BinarySource` value.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from chairman_harness.config import (
    CARDANO_CLI_ENV,
    CARDANO_NODE_CHAIRMAN_ENV,
    CARDANO_NODE_ENV,
    CARDANO_NODE_SRC_ENV,
    DEFAULT_PLAN_PATH,
    DEFAULT_PROJECT_BASE,
)
from chairman_harness.errors import ComponentNotFoundError, MissingBinFileError
from chairman_harness.launcher import ProcessConfig, RawCommand, StreamMode
from chairman_harness.plan import find_component, load_plan
from chairman_harness.quoting import format_command

logger = logging.getLogger(__name__)

# Package name -> environment variable overriding its binary
KNOWN_BINARIES: dict[str, str] = {
    "cardano-cli": CARDANO_CLI_ENV,
    "cardano-node": CARDANO_NODE_ENV,
    "cardano-node-chairman": CARDANO_NODE_CHAIRMAN_ENV,
}


@dataclass(frozen=True)
class EnvOverride:
    """Binary path taken from an environment variable."""

    path: str


@dataclass(frozen=True)
class PlanLookup:
    """Binary to be found in the build plan by package name."""

    package: str


BinarySource = Union[EnvOverride, PlanLookup]


@dataclass(frozen=True)
class ResolvedBinary:
    """An executable and the arguments to launch it with."""

    executable: str
    arguments: tuple[str, ...] = ()

    @property
    def command(self) -> RawCommand:
        return RawCommand(self.executable, self.arguments)

    def proc(
        self,
        *,
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
        stdin: StreamMode = StreamMode.INHERIT,
        stdout: StreamMode = StreamMode.INHERIT,
        stderr: StreamMode = StreamMode.INHERIT,
    ) -> ProcessConfig:
        """Build a process config that launches this binary."""
        return ProcessConfig(
            command=self.command,
            cwd=cwd,
            env=env,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
        )

    def __str__(self) -> str:
        return format_command(self.executable, self.arguments)


def lookup_override(env_var: str) -> str | None:
    """Return the non-empty value of ``env_var``, or None."""
    value = os.environ.get(env_var)
    return value or None


def select_binary_source(package: str, env_var: str) -> BinarySource:
    """Decide how the binary for ``package`` will be found."""
    override = lookup_override(env_var)
    if override is not None:
        return EnvOverride(override)
    return PlanLookup(package)


def plan_binary(package: str, plan_path: Path | None = None) -> str:
    """Return the ``bin-file`` of ``exe:<package>`` from the build plan.

    Args:
        package: Cabal package name of the executable.
        plan_path: Plan file location, ``../dist-newstyle/cache/plan.json``
            by default.

    Raises:
        PlanReadError: If the plan cannot be read.
        PlanDecodeError: If the plan cannot be decoded.
        ComponentNotFoundError: If the plan has no ``exe:<package>``.
        MissingBinFileError: If the component has no ``bin-file``.
    """
    plan = load_plan(plan_path if plan_path is not None else DEFAULT_PLAN_PATH)
    component = find_component(plan, package)
    if component is None:
        raise ComponentNotFoundError(package)
    if component.bin_file is None:
        raise MissingBinFileError(component)
    return component.bin_file


def resolve_binary(
    package: str,
    env_var: str,
    arguments: list[str] | tuple[str, ...] = (),
    *,
    plan_path: Path | None = None,
) -> ResolvedBinary:
    """Resolve the executable for ``package``.

    Args:
        package: Cabal package name corresponding to the executable.
        env_var: Environment variable pointing to the binary to run.
        arguments: Arguments passed to the binary unchanged.
        plan_path: Build plan location used when ``env_var`` is not set.

    Returns:
        The resolved binary.

    Raises:
        BuildPlanError: If the plan lookup fails. The build environment is
            broken and the error is not recoverable.
    """
    source = select_binary_source(package, env_var)
    if isinstance(source, EnvOverride):
        logger.debug("Using %s=%s for %s", env_var, source.path, package)
        return ResolvedBinary(source.path, tuple(arguments))

    executable = plan_binary(source.package, plan_path)
    logger.debug("Found %s in build plan: %s", package, executable)
    return ResolvedBinary(executable, tuple(arguments))


def proc_cli(
    arguments: list[str] | tuple[str, ...] = (), *, plan_path: Path | None = None
) -> ResolvedBinary:
    """Resolve cardano-cli."""
    return resolve_binary("cardano-cli", CARDANO_CLI_ENV, arguments, plan_path=plan_path)


def proc_node(
    arguments: list[str] | tuple[str, ...] = (), *, plan_path: Path | None = None
) -> ResolvedBinary:
    """Resolve cardano-node."""
    return resolve_binary("cardano-node", CARDANO_NODE_ENV, arguments, plan_path=plan_path)


def proc_chairman(
    arguments: list[str] | tuple[str, ...] = (), *, plan_path: Path | None = None
) -> ResolvedBinary:
    """Resolve cardano-node-chairman."""
    return resolve_binary(
        "cardano-node-chairman",
        CARDANO_NODE_CHAIRMAN_ENV,
        arguments,
        plan_path=plan_path,
    )


def get_project_base() -> str:
    """Return the cardano-node source directory (``CARDANO_NODE_SRC`` or ``..``)."""
    return os.environ.get(CARDANO_NODE_SRC_ENV, DEFAULT_PROJECT_BASE)


__all__ = [
    "KNOWN_BINARIES",
    "EnvOverride",
    "PlanLookup",
    "BinarySource",
    "ResolvedBinary",
    "lookup_override",
    "select_binary_source",
    "plan_binary",
    "resolve_binary",
    "proc_cli",
    "proc_node",
    "proc_chairman",
    "get_project_base",
]
