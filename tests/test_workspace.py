"""
Tests for the working directory setup and README generation.
"""

from pathlib import Path

import pytest

from ghostarch.adapters.mock import MockAdapter
from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import GroupSource, ResolvedGroup
from ghostarch.core.services import files, workspace
from ghostarch.core.services.prompts import Prompter, ScriptedPrompter
from ghostarch.core.services.workspace import (
    prompt_workdir_setup,
    render_readme,
    substitute,
    write_readme,
)

SUBDIRS = ["tools", "exploits", "wordlists", "payloads", "reports", "logs"]


@pytest.fixture(autouse=True)
def as_alice(monkeypatch, home: Path):
    monkeypatch.setattr(workspace, "current_user", lambda: "alice")
    monkeypatch.setattr(files, "current_user", lambda: "alice")
    monkeypatch.setattr(workspace, "user_home", lambda name: home)


def _group(name: str, description: str, packages: list[str]) -> ResolvedGroup:
    return ResolvedGroup(
        name=name,
        description=description,
        packages=packages,
        skip_flag=f"SKIP_{name.upper()}",
        source=GroupSource.MANIFEST,
    )


class TestSubstitute:
    def test_known_and_unknown(self):
        out = substitute("User __TARGET_USER__ in __WORKDIR__ (__OTHER__)", {"TARGET_USER": "bob", "WORKDIR": "/w"})
        assert out == "User bob in /w (__OTHER__)"


class TestRenderReadme:
    def test_user_and_workdir(self):
        text = render_readme("bob", "/home/bob/ghostarch")
        assert "- **User**: bob" in text
        assert "- **Working Directory**: /home/bob/ghostarch" in text
        assert "__" + "TARGET_USER__" not in text

    def test_default_tools_section(self):
        text = render_readme("bob", "/w")
        assert "- **Pentest Tools**: nmap, ettercap, wireshark-cli." in text
        assert "- **Recon Tools**: theharvester, recon-ng, dnsrecon." in text

    def test_groups_tools_section(self):
        text = render_readme("bob", "/w", [_group("web", "Web Tools", ["nikto", "gobuster"])])
        assert "- **Web Tools**: nikto, gobuster." in text
        assert "Pentest Tools" not in text.split("## WSL2")[0]

    def test_no_groups_installed(self):
        text = render_readme("bob", "/w", [])
        tools = text.split("## WSL2")[0]
        assert "- No tool groups were installed." in tools
        assert "Pentest Tools" not in tools

    def test_static_sections(self):
        text = render_readme("bob", "/w")
        for heading in ("## WSL2 Limitations", "## Troubleshooting", "## Dual WSL Setup"):
            assert heading in text


class TestPromptWorkdirSetup:
    def test_skip(self, runner: StepRunner, mock_adapter: MockAdapter):
        assert prompt_workdir_setup(runner, ScriptedPrompter(), InstallConfig(), "alice", skip=True) is None
        assert runner.report.warnings == ["Skipping working directory setup"]

    def test_defaults_current_user(self, runner: StepRunner, mock_adapter: MockAdapter, home: Path):
        workdir = prompt_workdir_setup(runner, Prompter(noninteractive=True), InstallConfig(), "alice")
        assert workdir == home / "ghostarch"
        assert mock_adapter.step_names() == (
            ["create-workdir", "init-workdir"] + [f"create-subdir-{d}" for d in SUBDIRS]
        )
        create = mock_adapter.calls_named("create-workdir")[0].action
        assert create.adapter == "filesystem"
        assert create.params["path"] == str(home / "ghostarch")
        init = mock_adapter.calls_named("init-workdir")[0].action.params
        assert init == {"operation": "init", "path": str(home / "ghostarch")}

    def test_config_workdir(self, runner: StepRunner, tmp_path: Path):
        config = InstallConfig(workdir=str(tmp_path / "ops"))
        workdir = prompt_workdir_setup(runner, Prompter(noninteractive=True), config, "alice")
        assert workdir == tmp_path / "ops"

    def test_declines_git_and_subdirs(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        prompter = ScriptedPrompter([str(tmp_path / "w"), "no", "no"])
        prompt_workdir_setup(runner, prompter, InstallConfig(), "alice")
        assert mock_adapter.step_names() == ["create-workdir"]
        assert prompter.asked[1] == "Initialize git repository in workdir? (yes/no)"
        assert prompter.asked[2] == "Create subdirectories (tools, exploits, wordlists)? (yes/no)"

    def test_existing_git_repo(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        (tmp_path / "w" / ".git").mkdir(parents=True)
        prompter = ScriptedPrompter([str(tmp_path / "w"), "yes", "no"])
        prompt_workdir_setup(runner, prompter, InstallConfig(), "alice")
        assert "init-workdir" not in mock_adapter.step_names()

    def test_other_user(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        prompter = ScriptedPrompter([str(tmp_path / "w")])
        config = InstallConfig(subdirectories=["tools"])
        prompt_workdir_setup(runner, prompter, config, "bob")
        create = mock_adapter.calls_named("create-workdir")[0].action
        assert create.adapter == "shell"
        assert create.params["argv"] == ["mkdir", "-p", str(tmp_path / "w")]
        assert create.params["run_as"] == "bob"
        assert mock_adapter.calls_named("init-workdir")[0].action.params["run_as"] == "bob"
        assert mock_adapter.calls_named("create-subdir-tools")[0].action.params["run_as"] == "bob"

    def test_git_init_failure_warns(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        mock_adapter.set_failure("init-workdir")
        workdir = prompt_workdir_setup(runner, ScriptedPrompter([str(tmp_path / "w")]), InstallConfig(), "alice")
        assert workdir == tmp_path / "w"
        assert any(w.startswith("Failed to initialize git") for w in runner.report.warnings)


class TestWriteReadme:
    def test_current_user(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        readme = write_readme(runner, "alice", tmp_path)
        assert readme == tmp_path / "README.md"
        assert mock_adapter.step_names() == ["write-readme"]
        params = mock_adapter.calls_named("write-readme")[0].action.params
        assert "- **User**: alice" in params["content"]

    def test_other_user(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        write_readme(runner, "bob", tmp_path)
        assert mock_adapter.step_names() == ["write-readme", "chown-readme"]
        write = mock_adapter.calls_named("write-readme")[0].action.params
        assert write["argv"] == ["tee", str(tmp_path / "README.md")]
        assert write["sudo"] is True
