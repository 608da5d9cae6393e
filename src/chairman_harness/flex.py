"""Run a binary to completion and return its stdout.

Being a 'flex' function means the environment determines how the process is
launched. When the binary's environment variable is set (nix deployments),
that binary is run directly. Otherwise the package is run through the build
tool, as ``cabal exec -- <package> <args...>``.
"""

from __future__ import annotations

import logging
import os
import subprocess

from chairman_harness.config import CARDANO_CLI_ENV, HarnessConfig
from chairman_harness.integration import Integration
from chairman_harness.quoting import format_command

logger = logging.getLogger(__name__)


def flex_command(
    package: str,
    env_var: str,
    arguments: list[str] | tuple[str, ...],
    build_tool: str,
) -> tuple[str, list[str]]:
    """Return the executable and argv used to run ``package``."""
    # Any set value wins, even an empty one
    override = os.environ.get(env_var)
    if override is not None:
        return override, list(arguments)
    return build_tool, ["exec", "--", package, *arguments]


def failure_report(
    package: str,
    arguments: list[str] | tuple[str, ...],
    stdout: str,
    stderr: str,
    exit_code: int,
) -> str:
    """Format the report for a process that exited with a non-zero code."""
    return "\n".join(
        [
            "Process exited with non-zero exit-code",
            "━━━━ command ━━━━",
            format_command(package, arguments),
            "━━━━ stdout ━━━━",
            stdout,
            "━━━━ stderr ━━━━",
            stderr,
            "━━━━ exit code ━━━━",
            str(exit_code),
        ]
    ) + "\n"


def exec_flex(
    integration: Integration,
    package: str,
    env_var: str,
    arguments: list[str] | tuple[str, ...],
    *,
    config: HarnessConfig | None = None,
) -> str:
    """Run ``package`` synchronously and return its stdout verbatim.

    Blocks the calling thread until the process exits. From async code use
    ``await asyncio.to_thread(exec_flex, ...)`` so the event loop keeps
    draining the pipes of already-launched processes.

    Args:
        integration: The current test's integration context.
        package: Cabal package name of the executable.
        env_var: Environment variable pointing to a prebuilt binary.
        arguments: Arguments to the binary.
        config: Harness configuration (build tool), defaults if omitted.

    Returns:
        Captured stdout.

    Raises:
        IntegrationFailure: If the process exits with a non-zero code.
        OSError: If the process cannot be started.
    """
    config = config or HarnessConfig()
    executable, argv = flex_command(package, env_var, arguments, config.build_tool)

    integration.annotate(f"Command: {executable} {' '.join(argv)}")

    completed = subprocess.run(
        [executable, *argv],
        input=b"",
        capture_output=True,
        check=False,
    )
    # Decoded by hand so line endings come back untranslated
    stdout = completed.stdout.decode("utf-8", errors="replace")
    stderr = completed.stderr.decode("utf-8", errors="replace")

    if completed.returncode != 0:
        integration.fail_message(
            failure_report(package, arguments, stdout, stderr, completed.returncode)
        )

    logger.debug("%s exited 0 (%d chars of stdout)", package, len(stdout))
    return stdout


def exec_cli(
    integration: Integration,
    arguments: list[str] | tuple[str, ...],
    *,
    config: HarnessConfig | None = None,
) -> str:
    """Run cardano-cli, returning its stdout."""
    return exec_flex(integration, "cardano-cli", CARDANO_CLI_ENV, arguments, config=config)


__all__ = ["flex_command", "failure_report", "exec_flex", "exec_cli"]
