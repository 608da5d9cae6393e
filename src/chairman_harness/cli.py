"""Command line entry point for the chairman integration harness.

Usage:
    chairman-harness resolve cardano-node -- run --config node.yaml
    chairman-harness exec cardano-cli -- version
    chairman-harness project-base
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from chairman_harness.config import load_harness_config
from chairman_harness.errors import BuildPlanError, HarnessConfigError, IntegrationFailure
from chairman_harness.flex import exec_flex
from chairman_harness.integration import Integration
from chairman_harness.resolver import KNOWN_BINARIES, get_project_base, resolve_binary

err_console = Console(stderr=True)

app = typer.Typer(
    name="chairman-harness",
    help="Resolve and run cardano binaries the way the integration tests do",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _env_var_for(package: str, env_var: Optional[str]) -> str:
    if env_var:
        return env_var
    known = KNOWN_BINARIES.get(package)
    if known is None:
        valid = ", ".join(sorted(KNOWN_BINARIES))
        err_console.print(
            f"[red]Unknown package:[/red] {escape(package)}. "
            f"Pass --env-var or use one of: {valid}"
        )
        raise typer.Exit(2)
    return known


@app.command()
def resolve(
    package: str = typer.Argument(..., help="Cabal package name of the executable"),
    arguments: Optional[List[str]] = typer.Argument(None, help="Arguments to the executable"),
    env_var: Optional[str] = typer.Option(None, "--env-var", help="Environment variable overriding the binary"),
    plan: Optional[Path] = typer.Option(None, "--plan", help="Build plan JSON file"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Harness config YAML file"),
) -> None:
    """Print the command line that would launch PACKAGE."""
    try:
        config = load_harness_config(config_file)
        resolved = resolve_binary(
            package,
            _env_var_for(package, env_var),
            arguments or [],
            plan_path=plan if plan is not None else config.plan_path,
        )
    except (BuildPlanError, HarnessConfigError) as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    typer.echo(str(resolved))


@app.command("exec")
def exec_command(
    package: str = typer.Argument(..., help="Cabal package name of the executable"),
    arguments: Optional[List[str]] = typer.Argument(None, help="Arguments to the executable"),
    env_var: Optional[str] = typer.Option(None, "--env-var", help="Environment variable overriding the binary"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Harness config YAML file"),
) -> None:
    """Run PACKAGE to completion and print its stdout."""
    try:
        config = load_harness_config(config_file)
    except HarnessConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    integration = Integration()
    try:
        stdout = exec_flex(
            integration,
            package,
            _env_var_for(package, env_var),
            arguments or [],
            config=config,
        )
    except IntegrationFailure as failure:
        err_console.print(
            Panel(Text(failure.message), title="[red]Execution failed[/red]", border_style="red"),
        )
        raise typer.Exit(1)
    except OSError as exc:
        err_console.print(f"[red]Cannot start process:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    typer.echo(stdout, nl=False)


@app.command("project-base")
def project_base() -> None:
    """Print the cardano-node source directory."""
    typer.echo(get_project_base())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
