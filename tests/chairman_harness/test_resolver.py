"""Tests for binary resolution (environment override vs. build plan)."""

from __future__ import annotations

from pathlib import Path

import pytest

from chairman_harness import resolver
from chairman_harness.errors import (
    ComponentNotFoundError,
    MissingBinFileError,
    PlanDecodeError,
    PlanReadError,
)
from chairman_harness.launcher import RawCommand, StreamMode
from chairman_harness.resolver import (
    EnvOverride,
    PlanLookup,
    ResolvedBinary,
    get_project_base,
    proc_chairman,
    proc_cli,
    proc_node,
    resolve_binary,
    select_binary_source,
)

from tests.chairman_harness.helpers import write_plan


class TestSelectBinarySource:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOO_BIN", "/opt/foo")

        assert select_binary_source("foo", "FOO_BIN") == EnvOverride("/opt/foo")

    def test_unset_falls_back_to_plan(self) -> None:
        assert select_binary_source("foo", "FOO_BIN_UNSET") == PlanLookup("foo")

    def test_empty_value_falls_back_to_plan(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOO_BIN", "")

        assert select_binary_source("foo", "FOO_BIN") == PlanLookup("foo")


class TestEnvOverride:
    def test_arguments_unchanged(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOO_BIN", "/opt/foo")

        resolved = resolve_binary("foo", "FOO_BIN", ["run", "--port", "3001"])

        assert resolved == ResolvedBinary("/opt/foo", ("run", "--port", "3001"))

    def test_plan_never_read(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fail_load(path: Path):
            raise AssertionError(f"plan read from {path}")

        monkeypatch.setenv("FOO_BIN", "/opt/foo")
        monkeypatch.setattr(resolver, "load_plan", fail_load)

        resolved = resolve_binary("foo", "FOO_BIN", [], plan_path=tmp_path / "missing.json")

        assert resolved.executable == "/opt/foo"


class TestPlanLookup:
    def test_finds_bin_file(self, tmp_path: Path) -> None:
        plan = write_plan(
            tmp_path / "plan.json",
            [{"component-name": "exe:foo", "bin-file": "/bin/foo"}],
        )

        resolved = resolve_binary("foo", "FOO_BIN_UNSET", ["--help"], plan_path=plan)

        assert resolved == ResolvedBinary("/bin/foo", ("--help",))

    def test_missing_component_names_package(self, tmp_path: Path) -> None:
        plan = write_plan(
            tmp_path / "plan.json",
            [{"component-name": "exe:bar", "bin-file": "/bin/bar"}],
        )

        with pytest.raises(ComponentNotFoundError) as exc_info:
            resolve_binary("foo", "FOO_BIN_UNSET", [], plan_path=plan)

        assert exc_info.value.package == "foo"
        assert str(exc_info.value) == "Cannot find exe:foo in plan"

    def test_missing_bin_file(self, plan_file: Path) -> None:
        with pytest.raises(MissingBinFileError) as exc_info:
            proc_chairman([], plan_path=plan_file)

        assert "exe:cardano-node-chairman" in str(exc_info.value)
        assert str(exc_info.value).startswith("missing bin-file in:")

    def test_undecodable_plan(self, tmp_path: Path) -> None:
        plan = tmp_path / "plan.json"
        plan.write_text("[]", encoding="utf-8")

        with pytest.raises(PlanDecodeError):
            resolve_binary("foo", "FOO_BIN_UNSET", [], plan_path=plan)

    def test_missing_plan_file(self, tmp_path: Path) -> None:
        with pytest.raises(PlanReadError):
            resolve_binary("foo", "FOO_BIN_UNSET", [], plan_path=tmp_path / "plan.json")

    def test_default_plan_location(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Without a path, the plan is read from ../dist-newstyle/cache."""
        write_plan(
            tmp_path / "dist-newstyle" / "cache" / "plan.json",
            [{"component-name": "exe:foo", "bin-file": "/bin/foo"}],
        )
        workdir = tmp_path / "cardano-node-chairman"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        assert resolve_binary("foo", "FOO_BIN_UNSET").executable == "/bin/foo"


class TestNamedBinaries:
    def test_cli_from_plan(self, plan_file: Path) -> None:
        assert proc_cli(["version"], plan_path=plan_file) == ResolvedBinary(
            "/build/cardano-cli/bin/cardano-cli", ("version",)
        )

    def test_node_from_env(self, monkeypatch: pytest.MonkeyPatch, plan_file: Path) -> None:
        monkeypatch.setenv("CARDANO_NODE", "/nix/store/abc-cardano-node/bin/cardano-node")

        resolved = proc_node(["run"], plan_path=plan_file)

        assert resolved.executable == "/nix/store/abc-cardano-node/bin/cardano-node"

    def test_chairman_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CARDANO_NODE_CHAIRMAN", "/usr/local/bin/chairman")

        assert proc_chairman(["--timeout", "60"]).arguments == ("--timeout", "60")


class TestResolvedBinary:
    def test_command_and_proc(self) -> None:
        resolved = ResolvedBinary("/bin/foo", ("a b", "c"))

        config = resolved.proc(cwd="/tmp", stdout=StreamMode.PIPE)

        assert resolved.command == RawCommand("/bin/foo", ("a b", "c"))
        assert config.command == resolved.command
        assert config.cwd == "/tmp"
        assert config.stdout is StreamMode.PIPE
        assert config.stdin is StreamMode.INHERIT

    def test_str_quotes_arguments(self) -> None:
        assert str(ResolvedBinary("/bin/foo", ("a b", "c"))) == '/bin/foo "a b" c'


class TestProjectBase:
    def test_default(self) -> None:
        assert get_project_base() == ".."

    def test_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CARDANO_NODE_SRC", "/src/cardano-node")

        assert get_project_base() == "/src/cardano-node"
