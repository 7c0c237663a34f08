"""
Tests for the CLI commands.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ghostarch import __version__
from ghostarch.core.services import accounts, files, system_checks, workspace
from ghostarch.main import cli


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def host(monkeypatch, home: Path):
    """Mock runs need a stable user and home; nothing real is touched."""
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(system_checks, "is_root", lambda: False)
    monkeypatch.setattr(system_checks, "is_wsl", lambda *a: True)
    for module in (accounts, files, workspace):
        monkeypatch.setattr(module, "current_user", lambda: "alice")
    monkeypatch.setattr(accounts, "user_exists", lambda name: name == "alice")
    monkeypatch.setattr(accounts, "user_home", lambda name: home)
    monkeypatch.setattr(workspace, "user_home", lambda name: home)
    monkeypatch.setattr(accounts, "command_available", lambda name: True)
    monkeypatch.setattr(accounts, "is_wsl", lambda: True)
    return home


class TestCliBasics:
    def test_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("core", "tools", "nvidia", "install", "groups", "config", "history"):
            assert command in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_tools_help_lists_skip_flags(self, cli_runner):
        result = cli_runner.invoke(cli, ["tools", "--help"])
        assert result.exit_code == 0
        for flag in ("--skip-networking", "--skip-pentest", "--skip-user", "--list-groups"):
            assert flag in result.output

    def test_log_file_written(self, cli_runner, isolated_env: Path):
        cli_runner.invoke(cli, ["--mock", "groups", "list"])
        assert (isolated_env / "install.log").is_file()


class TestGroupsCommand:
    def test_list_defaults(self, cli_runner):
        result = cli_runner.invoke(cli, ["groups", "list"])
        assert result.exit_code == 0
        assert "Mode: config" in result.output
        assert "Skip flag: SKIP_RECON" in result.output

    def test_list_json_manifest(self, cli_runner, tmp_path: Path):
        manifest = tmp_path / "packages.yml"
        manifest.write_text("groups:\n  web:\n    description: Web Tools\n    packages: [nikto]\n")
        result = cli_runner.invoke(cli, ["groups", "list", "--manifest", str(manifest), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["mode"] == "manifest"
        assert data["groups"][0]["name"] == "web"

    def test_list_missing_manifest(self, cli_runner, tmp_path: Path):
        result = cli_runner.invoke(cli, ["groups", "list", "--manifest", str(tmp_path / "nope.yml")])
        assert result.exit_code == 1
        assert "Manifest not found" in result.output

    def test_tools_list_groups(self, cli_runner):
        result = cli_runner.invoke(cli, ["tools", "--list-groups", "--skip-pentest"])
        assert result.exit_code == 0
        assert "Available package groups:" in result.output
        assert "Status: skipped" in result.output


class TestConfigCommand:
    def test_check_defaults(self, cli_runner):
        result = cli_runner.invoke(cli, ["config", "check"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "defaults will be used" in result.output

    def test_check_invalid(self, cli_runner, tmp_path: Path):
        config = tmp_path / "ghostarch.yml"
        config.write_text("shell: zsh\n")
        result = cli_runner.invoke(cli, ["-c", str(config), "config", "check"])
        assert result.exit_code == 1
        assert "Shell must be an absolute path" in result.output

    def test_check_json(self, cli_runner, tmp_path: Path):
        config = tmp_path / "ghostarch.yml"
        config.write_text("recon_packages: amass\n")
        result = cli_runner.invoke(cli, ["-c", str(config), "config", "check", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["mode"] == "config"


class TestInstallCommands:
    def test_nvidia_mock_and_history(self, cli_runner, host):
        result = cli_runner.invoke(cli, ["--mock", "nvidia", "--skip-test"])
        assert result.exit_code == 0, result.output
        assert "[mock] Ghostarch NVIDIA/CUDA setup" in result.output
        assert "GPU setup complete" in result.output

        history = cli_runner.invoke(cli, ["history", "--json"])
        assert history.exit_code == 0
        entries = json.loads(history.stdout)
        assert [e["operation_type"] for e in entries] == ["gpu"]

    def test_core_mock(self, cli_runner, host):
        result = cli_runner.invoke(cli, ["--mock", "-v", "core", "--skip-blackarch"])
        assert result.exit_code == 0, result.output
        assert "✓ system-update" in result.output
        assert "Skipping BlackArch repository setup" in result.output
        assert "Core installation complete" in result.output

    def test_tools_mock_noninteractive(self, cli_runner, host):
        result = cli_runner.invoke(cli, ["--mock", "-n", "tools", "--skip-additional", "--skip", "recon"])
        assert result.exit_code == 0, result.output
        assert "Installed: networking, programming, pentest" in result.output
        assert "Skipped: recon, additional" in result.output
        assert f"cd {host / 'ghostarch'}" in result.output

    def test_tools_cancelled(self, cli_runner, host):
        result = cli_runner.invoke(cli, ["--mock", "tools"], input="n\n")
        assert result.exit_code == 0
        assert "Installation cancelled" in result.output

    def test_install_mock_noninteractive(self, cli_runner, host):
        result = cli_runner.invoke(cli, ["--mock", "-n", "install", "--skip-blackarch"])
        assert result.exit_code == 0, result.output
        assert "Ghostarch installation complete" in result.output
        assert "wsl --terminate ArchLinux" in result.output

    def test_install_abort_exits_nonzero(self, cli_runner, host, tmp_path: Path):
        config = tmp_path / "ghostarch.yml"
        config.write_text("install_zsh: [bad]\n")
        result = cli_runner.invoke(cli, ["--mock", "-n", "-c", str(config), "install"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestHistoryCommand:
    def test_empty(self, cli_runner):
        result = cli_runner.invoke(cli, ["history"])
        assert result.exit_code == 0
        assert "No install runs recorded yet." in result.output
