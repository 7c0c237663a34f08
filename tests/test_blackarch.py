"""
Tests for the BlackArch repository bootstrap.
"""

from pathlib import Path

import pytest

from ghostarch.adapters.mock import MockAdapter
from ghostarch.core.engine.executor import InstallAborted, StepRunner
from ghostarch.core.models.action import Receipt
from ghostarch.core.models.config import BlackArchSettings
from ghostarch.core.services.blackarch import add_blackarch_repo, parse_sha256sum

DIGEST = "ab" * 32


def _published(mock: MockAdapter, digest: str = DIGEST) -> None:
    mock.set_metadata("download-strap", sha256=DIGEST)
    mock.set_response(
        "fetch-strap-checksum",
        Receipt.success(adapter="http", action_id="x", output=f"{digest}  strap.sh\n"),
    )


class TestParseSha256sum:
    def test_standard(self):
        assert parse_sha256sum(f"{DIGEST}  strap.sh\n") == DIGEST

    def test_uppercase(self):
        assert parse_sha256sum(f"{DIGEST.upper()}  strap.sh") == DIGEST

    def test_garbage(self):
        assert parse_sha256sum("<html>not found</html>") is None
        assert parse_sha256sum("") is None


class TestAddBlackArchRepo:
    def test_happy_path(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        _published(mock_adapter)
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert mock_adapter.step_names() == [
            "download-strap",
            "fetch-strap-checksum",
            "run-strap",
            "remove-strap",
            "query-keyring",
            "install-keyring",
        ]
        assert runner.report.warnings == []
        strap = str(tmp_path / "strap.sh")
        assert mock_adapter.calls_named("download-strap")[0].action.params["dest"] == strap
        run = mock_adapter.calls_named("run-strap")[0].action.params
        assert run["argv"] == ["bash", strap]
        assert run["sudo"] is True

    def test_keyring_install_params(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        _published(mock_adapter)
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        params = mock_adapter.calls_named("install-keyring")[0].action.params
        assert params["packages"] == ["blackarch-keyring"]
        assert params["overwrite"] == "*"
        assert params["needed"] is False

    def test_checksum_mismatch_warns_and_continues(
        self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path
    ):
        _published(mock_adapter, digest="cd" * 32)
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert "Checksum verification failed, proceeding anyway" in runner.report.warnings
        assert "run-strap" in mock_adapter.step_names()

    def test_checksum_unavailable_warns(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        mock_adapter.set_failure("fetch-strap-checksum", error="HTTP 404")
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert runner.report.warnings == ["Checksum verification failed, proceeding anyway"]

    def test_download_failure_aborts(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        mock_adapter.set_failure("download-strap", error="HTTP 503")
        with pytest.raises(InstallAborted, match="Failed to download strap.sh"):
            add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert mock_adapter.step_names() == ["download-strap"]

    def test_strap_failure_still_cleans_up(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        _published(mock_adapter)
        mock_adapter.set_failure("run-strap", error="pacman-key failed")
        with pytest.raises(InstallAborted, match="BlackArch strap script failed"):
            add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert mock_adapter.step_names()[-1] == "remove-strap"
        assert "install-keyring" not in mock_adapter.step_names()

    def test_keyring_already_installed(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        _published(mock_adapter)
        mock_adapter.set_metadata("query-keyring", installed=True)
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert "install-keyring" not in mock_adapter.step_names()

    def test_keyring_failure_warns(self, runner: StepRunner, mock_adapter: MockAdapter, tmp_path: Path):
        _published(mock_adapter)
        mock_adapter.set_failure("install-keyring", error="conflicting files")
        add_blackarch_repo(runner, BlackArchSettings(), tmp_dir=tmp_path)
        assert any("Keyring installation had issues" in w for w in runner.report.warnings)
