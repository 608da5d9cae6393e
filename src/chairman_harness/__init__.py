"""Process harness for cardano-node chairman integration tests.

This package launches the node, its CLI and the chairman monitor for
integration tests, captures their output and enforces timeouts.

Core Components:
    - Resolver: Find binaries via environment overrides or the cabal build plan
    - Launcher: Spawn processes with asyncio and register their cleanup
    - Waiter: Wait for exit, bounded or unbounded
    - Flex: Run a binary to completion and return its stdout

Usage:
    from chairman_harness import (
        Integration,
        create_process,
        proc_node,
        wait_seconds_for_process,
    )

    async with Integration() as integration:
        launched = await create_process(integration, proc_node(args).proc())
        outcome = await wait_seconds_for_process(integration, 60, launched)
"""

from chairman_harness.config import HarnessConfig, load_harness_config
from chairman_harness.errors import (
    BuildPlanError,
    ComponentNotFoundError,
    HarnessConfigError,
    HarnessError,
    IntegrationFailure,
    MissingBinFileError,
    PlanDecodeError,
    PlanReadError,
)
from chairman_harness.flex import exec_cli, exec_flex
from chairman_harness.integration import Integration
from chairman_harness.launcher import (
    LaunchedProcess,
    ProcessConfig,
    RawCommand,
    ShellCommand,
    StreamMode,
    create_process,
)
from chairman_harness.quoting import arg_quote
from chairman_harness.resolver import (
    EnvOverride,
    PlanLookup,
    ResolvedBinary,
    get_project_base,
    proc_chairman,
    proc_cli,
    proc_node,
    resolve_binary,
)
from chairman_harness.scope import ReleaseKey, ResourceScope
from chairman_harness.waiter import (
    TimedOut,
    wait_for_process,
    wait_seconds_for_process,
)

__all__ = [
    # Context
    "Integration",
    "ResourceScope",
    "ReleaseKey",
    # Config
    "HarnessConfig",
    "load_harness_config",
    # Resolution
    "EnvOverride",
    "PlanLookup",
    "ResolvedBinary",
    "resolve_binary",
    "proc_cli",
    "proc_node",
    "proc_chairman",
    "get_project_base",
    # Processes
    "RawCommand",
    "ShellCommand",
    "StreamMode",
    "ProcessConfig",
    "LaunchedProcess",
    "create_process",
    "TimedOut",
    "wait_for_process",
    "wait_seconds_for_process",
    "exec_flex",
    "exec_cli",
    "arg_quote",
    # Exceptions
    "HarnessError",
    "BuildPlanError",
    "PlanReadError",
    "PlanDecodeError",
    "ComponentNotFoundError",
    "MissingBinFileError",
    "HarnessConfigError",
    "IntegrationFailure",
]
