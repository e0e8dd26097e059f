"""Smoke tests for the CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from blogsmith import __version__
from blogsmith.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def short_redirects(tmp_path: Path) -> Path:
    config_path = tmp_path / ".blogsmith.toml"
    config_path.write_text('[redirects]\n"/old.html" = "/new/"\n"/gone/" = "/here/"\n')
    return config_path


class TestCLI:
    """Tests for the CLI entry point."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "deploy" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestBuildCommand:
    def test_builds_example_site(self, runner: CliRunner, site_dir: Path) -> None:
        result = runner.invoke(app, ["build", "--config", str(site_dir / ".blogsmith.toml")])
        assert result.exit_code == 0, result.output
        assert "Build complete!" in result.output
        assert "Collection posts: 3" in result.output
        assert "Redirects: 3" in result.output
        assert (site_dir / "build" / "index.html").is_file()

    def test_destination_override(self, runner: CliRunner, site_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["build", "-c", str(site_dir / ".blogsmith.toml"), "--destination", "public"],
        )
        assert result.exit_code == 0, result.output
        assert (site_dir / "public" / "rss.xml").is_file()
        assert not (site_dir / "build").exists()

    def test_failure_exits_nonzero(self, runner: CliRunner, site_dir: Path) -> None:
        (site_dir / "src" / "index.html").write_text("{% for %}", encoding="utf-8")
        result = runner.invoke(app, ["build", "--config", str(site_dir / ".blogsmith.toml")])
        assert result.exit_code == 1
        assert "Build failed" in result.output
        assert not (site_dir / "build").exists()

    def test_missing_source_exits_nonzero(self, runner: CliRunner, tmp_path: Path) -> None:
        config_path = tmp_path / ".blogsmith.toml"
        config_path.write_text('[build]\nsource = "nowhere"\n')
        result = runner.invoke(app, ["build", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "Build failed" in result.output

    def test_invalid_config_exits_nonzero(self, runner: CliRunner, tmp_path: Path) -> None:
        config_path = tmp_path / ".blogsmith.toml"
        config_path.write_text('[redirects]\n"relative.html" = "/new/"\n')
        result = runner.invoke(app, ["build", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestRedirectsCommand:
    def test_lists_table(self, runner: CliRunner, short_redirects: Path) -> None:
        result = runner.invoke(app, ["redirects", "--config", str(short_redirects)])
        assert result.exit_code == 0
        assert "Redirects" in result.output
        assert "/old.html" in result.output
        assert "gone/index.html" in result.output

    def test_empty_table(self, runner: CliRunner, tmp_path: Path) -> None:
        config_path = tmp_path / ".blogsmith.toml"
        config_path.write_text('[site]\nurl = "http://example.com"\n')
        result = runner.invoke(app, ["redirects", "--config", str(config_path)])
        assert result.exit_code == 0
        assert "No redirects configured" in result.output


class TestDeployCommand:
    def test_dry_run_prints_steps(self, runner: CliRunner, site_dir: Path) -> None:
        result = runner.invoke(
            app, ["deploy", "--config", str(site_dir / ".blogsmith.toml"), "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert "git subtree split --branch deploy --prefix build" in result.output
        assert "git push" not in result.output
        assert not (site_dir / "build").exists()

    @patch("blogsmith.deploy.subprocess.run")
    def test_deploy_builds_then_publishes(
        self, mock_run, runner: CliRunner, site_dir: Path
    ) -> None:
        def fake_git(cmd, **kwargs):
            stdout = f"{site_dir}\n" if cmd[1:3] == ["rev-parse", "--show-toplevel"] else "abc123\n"
            return MagicMock(returncode=0, stdout=stdout, stderr="")

        mock_run.side_effect = fake_git
        result = runner.invoke(
            app, ["deploy", "--config", str(site_dir / ".blogsmith.toml"), "--push"]
        )
        assert result.exit_code == 0, result.output
        assert "Deployed to master" in result.output
        assert (site_dir / "build" / "index.html").is_file()
        called = [c.args[0] for c in mock_run.call_args_list]
        assert ["git", "push", "origin", "master"] in called
        assert ["git", "add", "build", "--force"] in called

    @patch("blogsmith.deploy.subprocess.run")
    def test_git_failure_exits_nonzero(
        self, mock_run, runner: CliRunner, site_dir: Path
    ) -> None:
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: not a git repository")
        result = runner.invoke(app, ["deploy", "--config", str(site_dir / ".blogsmith.toml")])
        assert result.exit_code == 1
        assert "Deploy failed" in result.output
