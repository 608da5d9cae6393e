"""Configuration for the chairman integration harness.

Environment variables select prebuilt binaries. When they are absent,
binaries are found through the build plan that ``cabal`` writes into
``dist-newstyle``. A small optional YAML file can override the build tool
and the plan location:

    # .chairman-harness.yaml
    build_tool: cabal
    plan_path: ../dist-newstyle/cache/plan.json
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from chairman_harness.errors import HarnessConfigError

logger = logging.getLogger(__name__)

CARDANO_CLI_ENV = "CARDANO_CLI"
CARDANO_NODE_ENV = "CARDANO_NODE"
CARDANO_NODE_CHAIRMAN_ENV = "CARDANO_NODE_CHAIRMAN"
CARDANO_NODE_SRC_ENV = "CARDANO_NODE_SRC"

DEFAULT_PROJECT_BASE = ".."
DEFAULT_BUILD_TOOL = "cabal"
# Relative to the working directory of the test run
DEFAULT_PLAN_PATH = Path("..") / "dist-newstyle" / "cache" / "plan.json"
DEFAULT_CONFIG_FILE = Path(".chairman-harness.yaml")


@dataclass
class HarnessConfig:
    """Harness configuration.

    Attributes:
        build_tool: Tool used as ``<tool> exec -- <package>`` when no binary
            override is set.
        plan_path: Location of the build plan JSON file.
    """

    build_tool: str = DEFAULT_BUILD_TOOL
    plan_path: Path = field(default_factory=lambda: DEFAULT_PLAN_PATH)


def load_harness_config(config_file: Path | None = None) -> HarnessConfig:
    """Load harness configuration from a YAML file.

    Args:
        config_file: Path to the config file. Defaults to
            ``.chairman-harness.yaml`` in the working directory.

    Returns:
        HarnessConfig instance (defaults if the file does not exist)

    Raises:
        HarnessConfigError: If the file is not valid YAML or has bad values.
    """
    path = config_file if config_file is not None else DEFAULT_CONFIG_FILE

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return HarnessConfig()

    yaml = YAML(typ="safe")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except YAMLError as e:
        raise HarnessConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise HarnessConfigError(f"Expected a mapping in {path}")

    config = HarnessConfig()

    build_tool = data.get("build_tool", config.build_tool)
    if not isinstance(build_tool, str) or not build_tool:
        raise HarnessConfigError(
            f"Invalid build_tool in {path}: expected a non-empty string"
        )
    config.build_tool = build_tool

    plan_path = data.get("plan_path")
    if plan_path is not None:
        if not isinstance(plan_path, str) or not plan_path:
            raise HarnessConfigError(
                f"Invalid plan_path in {path}: expected a non-empty string"
            )
        config.plan_path = Path(plan_path)

    unknown = sorted(set(data) - {"build_tool", "plan_path"})
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))

    return config


__all__ = [
    "CARDANO_CLI_ENV",
    "CARDANO_NODE_ENV",
    "CARDANO_NODE_CHAIRMAN_ENV",
    "CARDANO_NODE_SRC_ENV",
    "DEFAULT_PROJECT_BASE",
    "DEFAULT_BUILD_TOOL",
    "DEFAULT_PLAN_PATH",
    "DEFAULT_CONFIG_FILE",
    "HarnessConfig",
    "load_harness_config",
]
