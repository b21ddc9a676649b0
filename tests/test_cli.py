"""Tests for the glpipes CLI."""

import pytest
from click.testing import CliRunner

import glpipes.tui
from glpipes.cli import cli
from glpipes.clients import GitLabClient, GitLabError
from glpipes.config import ConfigError, Settings


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def no_tui(monkeypatch):
    """Replace the TUI with a stub that records the navigator it was given."""
    seen = {}

    def fake_run_tui(navigator, url=None):
        seen["navigator"] = navigator
        seen["url"] = url
        return 0

    monkeypatch.setattr(glpipes.tui, "run_tui", fake_run_tui)
    return seen


class TestSettings:
    """Tests for environment configuration."""

    def test_token_required(self) -> None:
        with pytest.raises(ConfigError, match="GITLAB_PERSONAL_TOKEN"):
            Settings.from_env({})

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Settings.from_env({"GITLAB_PERSONAL_TOKEN": ""})

    def test_default_url(self) -> None:
        settings = Settings.from_env({"GITLAB_PERSONAL_TOKEN": "tok"})
        assert settings.url == "https://gitlab.com"
        assert settings.api_url == "https://gitlab.com/api/v4"

    def test_custom_url(self) -> None:
        settings = Settings.from_env({
            "GITLAB_PERSONAL_TOKEN": "tok",
            "GITLAB_URL": "https://gitlab.example.com/",
        })
        assert settings.api_url == "https://gitlab.example.com/api/v4"


class TestCLI:
    """Tests for the glpipes command."""

    def test_cli_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_cli_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "GITLAB_PERSONAL_TOKEN" in result.output
        assert "Keyboard shortcuts" in result.output

    def test_missing_token_exits(self, runner: CliRunner, monkeypatch, no_tui) -> None:
        monkeypatch.delenv("GITLAB_PERSONAL_TOKEN", raising=False)

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "Please set GITLAB_PERSONAL_TOKEN environment variable." in result.output
        assert "navigator" not in no_tui

    def test_bad_url_exits(self, runner: CliRunner, monkeypatch, no_tui) -> None:
        monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "tok")
        monkeypatch.setenv("GITLAB_URL", "not a url")

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "Error creating GitLab client" in result.output
        assert "navigator" not in no_tui

    def test_group_fetch_failure_exits(self, runner: CliRunner, monkeypatch, no_tui) -> None:
        monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "tok")

        def fail(self):
            raise GitLabError("GET /groups failed: 401 Unauthorized", status_code=401)

        monkeypatch.setattr(GitLabClient, "list_groups", fail)

        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "Error fetching groups" in result.output
        assert "navigator" not in no_tui

    def test_starts_tui_with_built_tree(
        self, runner: CliRunner, monkeypatch, no_tui, fake_gitlab
    ) -> None:
        monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "tok")
        monkeypatch.setenv("GITLAB_URL", "https://gitlab.example.com")
        monkeypatch.setattr(GitLabClient, "list_groups", lambda self: fake_gitlab.list_groups())
        monkeypatch.setattr(
            GitLabClient,
            "list_group_projects",
            lambda self, group_id: fake_gitlab.list_group_projects(group_id),
        )

        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        navigator = no_tui["navigator"]
        assert navigator.started
        assert [node.group.name for node in navigator.screen.groups] == ["Infra", "Empty"]
        assert no_tui["url"] == "https://gitlab.example.com"

    def test_log_file(self, runner: CliRunner, monkeypatch, no_tui, tmp_path) -> None:
        monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "tok")
        monkeypatch.setattr(GitLabClient, "list_groups", lambda self: [])
        log_file = tmp_path / "glpipes.log"

        result = runner.invoke(cli, ["--log-file", str(log_file)])

        assert result.exit_code == 0
        assert "Connecting to instance https://gitlab.com" in log_file.read_text()
