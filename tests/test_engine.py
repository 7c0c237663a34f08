"""
Tests for the step runner: dispatch, failure policies and reports.
"""

import json
from pathlib import Path

import pytest

from ghostarch.adapters.mock import MockAdapter
from ghostarch.adapters.registry import AdapterRegistry
from ghostarch.core.engine.executor import (
    ExecutionReport,
    InstallAborted,
    StepRunner,
    generate_operation_id,
    write_audit_entry,
)
from ghostarch.core.persistence.audit import AuditWriter


class TestStepRunner:
    def test_success_recorded(self, runner: StepRunner, mock_adapter: MockAdapter):
        receipt = runner.run("pacman", "install-zsh", {"operation": "install", "packages": ["zsh"]})
        assert receipt.ok
        assert runner.report.total == 1
        assert runner.report.steps[0].name == "install-zsh"
        call = mock_adapter.calls_named("install-zsh")[0]
        assert call.action.params["packages"] == ["zsh"]
        assert call.action.phase == "test"

    def test_action_ids_are_sequential(self, runner: StepRunner, mock_adapter: MockAdapter):
        runner.run("shell", "first")
        runner.run("shell", "second")
        ids = [c.action.id for c in mock_adapter.call_log]
        assert ids == ["op-test:01:first", "op-test:02:second"]

    def test_warn_continues(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("chsh-zsh", error="chsh: PAM authentication failed")
        receipt = runner.run("users", "chsh-zsh", message="Failed to set zsh as default shell")
        assert receipt.failed
        assert runner.report.warnings == [
            "Failed to set zsh as default shell: chsh: PAM authentication failed"
        ]
        assert not runner.report.aborted

    def test_abort_raises(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("system-update", error="exit 1")
        with pytest.raises(InstallAborted, match="System update failed") as exc:
            runner.run("pacman", "system-update", on_failure="abort", message="System update failed")
        assert exc.value.receipt.failed
        assert runner.report.aborted
        assert runner.report.status == "aborted"

    def test_ignore_is_silent(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("query-keyring")
        runner.run("pacman", "query-keyring", on_failure="ignore")
        assert runner.report.warnings == []
        assert runner.report.failed == 1

    def test_dry_run(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="pacman"))
        runner = StepRunner(registry, phase="core", dry_run=True)
        receipt = runner.run("pacman", "system-update", {"operation": "update"})
        assert receipt.skipped
        assert runner.report.skipped == 1

    def test_runner_warn(self, runner: StepRunner):
        runner.warn("Skipping BlackArch repository setup")
        assert runner.report.warnings == ["Skipping BlackArch repository setup"]


class TestExecutionReport:
    def test_status_ok(self, runner: StepRunner):
        runner.run("shell", "a")
        assert runner.report.status == "ok"

    def test_status_partial(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("b")
        runner.run("shell", "a")
        runner.run("shell", "b")
        assert runner.report.status == "partial"
        assert runner.report.succeeded == 1
        assert runner.report.failed == 1

    def test_status_failed(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("a")
        runner.run("shell", "a")
        assert runner.report.status == "failed"

    def test_empty_report_ok(self):
        assert ExecutionReport().status == "ok"

    def test_to_dict_serializable(self, runner: StepRunner):
        runner.run("shell", "a")
        data = runner.report.to_dict()
        json.dumps(data)
        assert data["operation_id"] == "op-test"
        assert data["steps"][0]["name"] == "a"


class TestAuditEntry:
    def test_write_audit_entry(self, runner: StepRunner, tmp_path: Path):
        runner.run("shell", "a")
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        entry = write_audit_entry(
            runner.report, writer, duration_ms=12, target_user="bob", groups_installed=["recon"]
        )
        assert entry.operation_type == "test"
        assert entry.actions_total == 1
        stored = writer.read_all()
        assert stored[0].target_user == "bob"
        assert stored[0].groups_installed == ["recon"]


def test_generate_operation_id_unique():
    ids = {generate_operation_id() for _ in range(20)}
    assert len(ids) == 20
    assert all(i.startswith("op-") for i in ids)
