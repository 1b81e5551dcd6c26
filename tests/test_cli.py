"""Tests for CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner
from docserver import server
from docserver.cli import cli
from docserver.config import Config


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch) -> list[Config]:
    """Capture the config run_server is called with instead of serving."""
    configs: list[Config] = []
    monkeypatch.setattr(server, "run_server", lambda config: configs.append(config))
    return configs


class TestServeCommand:
    """Tests for the serve command."""

    def test__root_and_port__passed_to_server(
        self, docs_root: Path, served: list[Config]
    ) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "--root", str(docs_root), "--port", "9000"])

        assert result.exit_code == 0, result.output
        assert f"Document root: {docs_root}" in result.output
        assert served[0].docs.root == docs_root
        assert served[0].server.port == 9000

    def test__addr__sets_host_and_port(self, docs_root: Path, served: list[Config]) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["serve", "--root", str(docs_root), "--addr", "0.0.0.0:8123"]
        )

        assert result.exit_code == 0, result.output
        assert "Starting server on 0.0.0.0:8123" in result.output

    def test__filters__repeatable(self, docs_root: Path, served: list[Config]) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["serve", "-r", str(docs_root), "-f", "secret", "-f", r"\.git"]
        )

        assert result.exit_code == 0, result.output
        assert [p.pattern for p in served[0].docs.filters] == ["secret", r"\.git"]
        assert "Filters: secret, \\.git" in result.output

    def test__config_file__loaded(
        self, tmp_path: Path, docs_root: Path, served: list[Config]
    ) -> None:
        config_file = tmp_path / "docserver.toml"
        config_file.write_text(f'[docs]\nroot = "{docs_root.name}"\nchroot = true\n')

        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "-c", str(config_file)])

        assert result.exit_code == 0, result.output
        assert served[0].docs.chroot is True
        assert "chroot: enabled" in result.output

    def test__invalid_filter__exits_with_error(
        self, docs_root: Path, served: list[Config]
    ) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "-r", str(docs_root), "-f", "("])

        assert result.exit_code == 1
        assert "Invalid filter" in result.output
        assert served == []

    def test__invalid_addr__exits_with_error(
        self, docs_root: Path, served: list[Config]
    ) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "-r", str(docs_root), "--addr", "nope"])

        assert result.exit_code == 1
        assert "Invalid listen address" in result.output

    def test__missing_root__rejected(self, tmp_path: Path, served: list[Config]) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "--root", str(tmp_path / "missing")])

        assert result.exit_code != 0
        assert served == []
