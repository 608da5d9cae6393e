"""Helpers for harness tests.

Child processes are Python one-liners run with the current interpreter, so
the tests need nothing beyond the interpreter itself.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from chairman_harness.launcher import ProcessConfig, RawCommand

PYTHON = sys.executable


def python_config(code: str, **kwargs) -> ProcessConfig:
    """Process config running ``code`` with the current interpreter."""
    return ProcessConfig(command=RawCommand(PYTHON, ("-c", code)), **kwargs)


def write_plan(path: Path, components: list[dict]) -> Path:
    """Write a minimal cabal plan.json with the given install-plan entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"cabal-version": "3.4.0.0", "install-plan": components}),
        encoding="utf-8",
    )
    return path
