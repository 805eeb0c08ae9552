"""CLI integration tests using Click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import issuecast.app as app_module
from issuecast.cli import cli
from issuecast.config import Settings


class TestList:
    def test_sorted_by_id(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["list", "--data-dir", str(populated_dir)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("#1")
        assert "Typo on homepage" in lines[0]
        assert lines[1].startswith("#2")
        assert "(2 comments)" in lines[1]
        assert "2 issues" in result.output

    def test_status_filter(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["list", "--data-dir", str(populated_dir), "--status", "Closed"])
        assert result.exit_code == 0
        assert "Typo on homepage" in result.output
        assert "Login fails" not in result.output

    def test_json(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["list", "--data-dir", str(populated_dir), "--json"])
        data = json.loads(result.output)
        assert [i["id"] for i in data] == [1, 2]

    def test_data_dir_from_env(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["list"], env={"ISSUECAST_DATA_DIR": str(populated_dir)})
        assert result.exit_code == 0
        assert "2 issues" in result.output

    def test_missing_data_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["list", "--data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert not (tmp_path / "issues.json").exists()


class TestShow:
    def test_show_with_comments(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["show", "2", "--data-dir", str(populated_dir)])
        assert result.exit_code == 0
        assert "Login fails" in result.output
        assert "In Progress" in result.output
        assert "Bob: Reproduced" in result.output
        assert result.output.index("Reproduced") < result.output.index("Fix incoming")

    def test_show_json(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["show", "1", "--data-dir", str(populated_dir), "--json"])
        assert json.loads(result.output)["createdBy"] == "Carol"

    def test_not_found(self, cli_runner: CliRunner, populated_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["show", "99", "--data-dir", str(populated_dir)])
        assert result.exit_code == 1
        assert "Not found: 99" in result.output


class TestServe:
    @pytest.fixture
    def captured(self, monkeypatch: pytest.MonkeyPatch) -> list[Settings]:
        calls: list[Settings] = []
        monkeypatch.setattr(app_module, "main", calls.append)
        return calls

    def test_defaults(self, cli_runner: CliRunner, captured: list[Settings], tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["serve", "--data-dir", str(tmp_path)], env={"PORT": None, "ISSUECAST_NO_GIT": None})
        assert result.exit_code == 0, result.output
        (settings,) = captured
        assert settings.port == 3000
        assert settings.host == "127.0.0.1"
        assert settings.git is True
        assert settings.data_dir == tmp_path.resolve()

    def test_port_from_env(self, cli_runner: CliRunner, captured: list[Settings], tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["serve", "--data-dir", str(tmp_path)], env={"PORT": "8123"})
        assert result.exit_code == 0, result.output
        assert captured[0].port == 8123

    def test_options_override(self, cli_runner: CliRunner, captured: list[Settings], tmp_path: Path) -> None:
        result = cli_runner.invoke(
            cli,
            ["serve", "--data-dir", str(tmp_path), "--port", "9000", "--host", "0.0.0.0", "--no-git"],
            env={"PORT": "8123"},
        )
        assert result.exit_code == 0, result.output
        assert (captured[0].port, captured[0].host, captured[0].git) == (9000, "0.0.0.0", False)

    def test_invalid_port_rejected(self, cli_runner: CliRunner, captured: list[Settings], tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["serve", "--data-dir", str(tmp_path), "--port", "70000"])
        assert result.exit_code == 2
        assert captured == []


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "issuecast" in result.output
