"""Shared fixtures for harness tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from chairman_harness.config import (
    CARDANO_CLI_ENV,
    CARDANO_NODE_CHAIRMAN_ENV,
    CARDANO_NODE_ENV,
    CARDANO_NODE_SRC_ENV,
)
from chairman_harness.launcher import StreamMode

from tests.chairman_harness.helpers import write_plan


@pytest.fixture(autouse=True)
def clean_binary_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without binary overrides from the outer environment."""
    for name in (
        CARDANO_CLI_ENV,
        CARDANO_NODE_ENV,
        CARDANO_NODE_CHAIRMAN_ENV,
        CARDANO_NODE_SRC_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def plan_file(tmp_path: Path) -> Path:
    """Plan with cardano-node, cardano-cli and a malformed chairman entry."""
    return write_plan(
        tmp_path / "dist-newstyle" / "cache" / "plan.json",
        [
            {"type": "configured", "id": "base-4.14.1.0", "pkg-name": "base"},
            {
                "type": "configured",
                "component-name": "lib",
                "pkg-name": "cardano-node",
            },
            {
                "type": "configured",
                "component-name": "exe:cardano-node",
                "bin-file": "/build/cardano-node/bin/cardano-node",
            },
            {
                "type": "configured",
                "component-name": "exe:cardano-cli",
                "bin-file": "/build/cardano-cli/bin/cardano-cli",
            },
            {
                "type": "configured",
                "component-name": "exe:cardano-node-chairman",
            },
        ],
    )


@pytest.fixture
def piped() -> dict[str, StreamMode]:
    return {"stdout": StreamMode.PIPE, "stderr": StreamMode.PIPE}
