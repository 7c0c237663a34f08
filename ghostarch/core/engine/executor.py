"""
Step runner: the central execution loop.

Install flows are interactive, so they can't be planned up front: a
service asks a question, then runs a step, then decides the next one
from the receipt. ``StepRunner`` is the single path every step takes:

    step → Action → registry → Receipt → report (+ warn / abort)

Each step declares what a failure means:
    "abort"   the flow can't continue: raises InstallAborted
    "warn"    log a warning and carry on (the common case)
    "ignore"  expected to fail sometimes: DEBUG only
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from ghostarch.adapters.registry import AdapterRegistry
from ghostarch.core.models.action import Action, Receipt
from ghostarch.core.persistence.audit import AuditEntry, AuditWriter

logger = logging.getLogger(__name__)

OnFailure = Literal["abort", "warn", "ignore"]


class InstallAborted(Exception):
    """A required step failed; the install flow stops here."""

    def __init__(self, message: str, receipt: Receipt | None = None):
        super().__init__(message)
        self.receipt = receipt


@dataclass
class StepRecord:
    """One executed step."""

    name: str
    receipt: Receipt
    on_failure: str = "warn"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "on_failure": self.on_failure,
            "receipt": self.receipt.model_dump(mode="json"),
        }


@dataclass
class ExecutionReport:
    """Everything a run did, in order."""

    operation_id: str = ""
    phase: str = ""
    steps: list[StepRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def receipts(self) -> list[Receipt]:
        return [s.receipt for s in self.steps]

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "phase": self.phase,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "warnings": self.warnings,
            "steps": [s.to_dict() for s in self.steps],
        }


class StepRunner:
    """Dispatch steps through the registry and keep the report."""

    def __init__(
        self,
        registry: AdapterRegistry,
        phase: str = "",
        operation_id: str | None = None,
        dry_run: bool = False,
    ):
        self.registry = registry
        self.dry_run = dry_run
        self.report = ExecutionReport(
            operation_id=operation_id or generate_operation_id(),
            phase=phase,
        )
        self._started = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._started) * 1000)

    def warn(self, message: str) -> None:
        """Log a warning and keep it for the run summary."""
        logger.warning(message)
        self.report.warnings.append(message)

    def run(
        self,
        adapter: str,
        name: str,
        params: dict[str, Any] | None = None,
        *,
        on_failure: OnFailure = "warn",
        message: str | None = None,
        working_dir: str | None = None,
    ) -> Receipt:
        """Execute one step.

        Args:
            adapter: Adapter name (pacman, users, git, http, shell, filesystem).
            name: Step name, e.g. ``install-zsh``.
            params: Adapter params.
            on_failure: What a failed receipt means (see module docstring).
            message: Text for the warning/abort; defaults to the receipt error.
            working_dir: Working directory for the adapter.

        Returns:
            The receipt (failed receipts are returned for "warn"/"ignore").

        Raises:
            InstallAborted: When the step fails and ``on_failure="abort"``.
        """
        action = Action(
            id=f"{self.report.operation_id}:{len(self.report.steps) + 1:02d}:{name}",
            name=name,
            adapter=adapter,
            phase=self.report.phase,
            params=dict(params or {}),
        )
        receipt = self.registry.execute_action(action, working_dir=working_dir, dry_run=self.dry_run)
        self.report.steps.append(StepRecord(name=name, receipt=receipt, on_failure=on_failure))

        status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.debug("%s %s → %s", status_marker, name, receipt.status)

        if receipt.skipped and receipt.output:
            logger.info(receipt.output)

        if receipt.failed:
            detail = message or f"{name} failed"
            if receipt.error:
                detail = f"{detail}: {receipt.error}"
            if on_failure == "abort":
                logger.error(detail)
                self.report.aborted = True
                raise InstallAborted(detail, receipt)
            if on_failure == "warn":
                self.warn(detail)
            else:
                logger.debug(detail)

        return receipt


def write_audit_entry(
    report: ExecutionReport,
    audit_writer: AuditWriter,
    *,
    duration_ms: int = 0,
    dry_run: bool = False,
    errors: list[str] | None = None,
    **fields: Any,
) -> AuditEntry:
    """Write one run's results to the audit ledger."""
    entry = AuditEntry(
        operation_id=report.operation_id,
        operation_type=report.phase,
        status=report.status,
        actions_total=report.total,
        actions_succeeded=report.succeeded,
        actions_failed=report.failed,
        duration_ms=duration_ms,
        dry_run=dry_run,
        errors=list(errors or []),
        **fields,
    )
    audit_writer.write(entry)
    return entry


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
