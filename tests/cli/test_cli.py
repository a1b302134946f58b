"""Tests for the rommap CLI."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from rommap import __version__
from rommap.cli import cli

PLUGIN = textwrap.dedent(
    """
    from rommap.plugins import hookimpl


    class UsersPlugin:
        @hookimpl
        def configure_setup(self, setup):
            setup.relation("users", primary_key=("name",))
            setup.commands("users").define("create", result="one")
    """
)

pytestmark = pytest.mark.usefixtures("_isolated_project", "_restore_logging", "_telemetry_reset")


def _write_plugin(root: Path) -> None:
    plugin_dir = root / ".rommap" / "plugins"
    plugin_dir.mkdir(parents=True)
    (plugin_dir / "users.py").write_text(PLUGIN)


class TestRoot:
    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("gateways", "relations", "lint"):
            assert name in result.output

    def test_no_command_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(tmp_path / "missing.toml"), "gateways"])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["gateways", "--examples"])

        assert result.exit_code == 0
        assert "Examples for 'cli gateways'" in result.output
        assert "rommap --json gateways" in result.output


class TestGateways:
    def test_default_memory_gateway(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["gateways"])

        assert result.exit_code == 0, result.output
        assert "default" in result.output
        assert "memory" in result.output

    def test_json(self, cli_runner: CliRunner, tmp_path: Path, sqlite_uri: str) -> None:
        (tmp_path / "rommap.toml").write_text(f'[gateways]\nreports = "{sqlite_uri}"\n')

        result = cli_runner.invoke(cli, ["--json", "gateways"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["ok"] is True
        assert payload["data"]["gateways"] == [
            {"name": "reports", "adapter": "sql", "datasets": ["tasks", "users"]},
        ]

    def test_unknown_adapter(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "rommap.toml").write_text('[gateways]\ndefault = "nosuch://x"\n')

        result = cli_runner.invoke(cli, ["gateways"])

        assert result.exit_code == 1
        assert "No adapter registered for 'nosuch'" in result.output


class TestRelations:
    def test_lists_plugin_relations(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _write_plugin(tmp_path)

        result = cli_runner.invoke(cli, ["--json", "relations"])

        assert result.exit_code == 0, result.output
        [relation] = json.loads(result.output)["data"]["relations"]
        assert relation["name"] == "users"
        assert relation["commands"] == ["create"]
        assert relation["primary_key"] == ["name"]

    def test_plugins_can_be_disabled(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _write_plugin(tmp_path)
        (tmp_path / "rommap.toml").write_text("[plugins]\nenabled = false\n")

        result = cli_runner.invoke(cli, ["relations"])

        assert result.exit_code == 0, result.output
        assert "No relations registered." in result.output


class TestLint:
    def test_passes_for_builtin_gateways(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["lint"])

        assert result.exit_code == 0, result.output
        assert "OK  lint" in result.output
        assert "lints_passed" in result.output

    def test_verbose_lists_each_lint(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "lint", "default"])

        assert result.exit_code == 0, result.output
        assert "pass default disconnect" in result.output
        assert "LintService.lint" in result.output

    def test_unknown_gateway(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["lint", "archive"])

        assert result.exit_code == 1
        assert "No gateway named 'archive'" in result.output

    def test_unknown_gateway_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "lint", "archive"])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["error"]["code"] == "UNKNOWN_GATEWAY"
