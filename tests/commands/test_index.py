"""Tests for the index CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from folio.cli import cli
from tests.conftest import write_doc


@pytest.fixture
def site(site_root: Path, content_root: Path) -> Path:
    write_doc(content_root, "Home.md", "Hi.", title="Home", date="2024-02-01", tags=["intro"])
    write_doc(content_root, "notes/Home.md", "Again.", title="Home Again", date="2024-01-01")
    write_doc(content_root, "notes/Plan.md", "Later.", title="Plan", draft="true", tags=["intro", "todo"])
    return site_root


@pytest.mark.usefixtures("_isolated_site")
class TestIndexCommand:
    def test_index_human_output(self, cli_runner: CliRunner, site: Path) -> None:
        result = cli_runner.invoke(cli, ["index"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines()[0].split() == ["OK", "index"]
        assert "page_count: 3" in result.stdout
        assert "draft_count: 1" in result.stdout
        assert "intro" in result.stdout
        assert "duplicate 'Home':" in result.stdout

    def test_index_duplicate_warning_on_stderr(self, cli_runner: CliRunner, site: Path) -> None:
        result = cli_runner.invoke(cli, ["index"])
        assert "WARNING: Duplicate page name 'Home'" in result.stderr

    def test_index_json_output(self, cli_runner: CliRunner, site: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "index"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "index"
        assert data["data"]["tags"] == {"intro": 2, "todo": 1}
        assert data["data"]["folders"] == {"/": 1, "notes": 2}
        assert list(data["data"]["duplicates"]) == ["Home"]

    def test_index_quiet(self, cli_runner: CliRunner, site: Path) -> None:
        result = cli_runner.invoke(cli, ["-q", "index"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: index"

    def test_index_does_not_write_output(self, cli_runner: CliRunner, site: Path) -> None:
        cli_runner.invoke(cli, ["index"])
        assert not (site / "public").exists()

    def test_index_empty_site(self, cli_runner: CliRunner, site_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "index"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["page_count"] == 0
