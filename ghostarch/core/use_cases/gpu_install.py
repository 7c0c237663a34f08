"""
GPU install use case: NVIDIA driver, CUDA and hashcat for WSL2.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ghostarch.adapters.registry import AdapterRegistry, build_registry
from ghostarch.core.config.loader import ConfigError, load_config
from ghostarch.core.engine.executor import (
    ExecutionReport,
    InstallAborted,
    StepRunner,
    write_audit_entry,
)
from ghostarch.core.persistence.audit import AuditWriter
from ghostarch.core.services.gpu import DEFAULT_GPU_PACKAGES, install_gpu_packages, verify_gpu
from ghostarch.core.services.system_checks import check_environment, check_sudo

logger = logging.getLogger(__name__)


@dataclass
class GpuInstallResult:
    """Result of the GPU installation."""

    report: ExecutionReport | None = None
    packages: list[str] = field(default_factory=list)
    gpu_visible: bool | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        result["packages"] = self.packages
        result["gpu_visible"] = self.gpu_visible
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_gpu_install(
    config_path: Path | None = None,
    skip_test: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    audit_writer: AuditWriter | None = None,
) -> GpuInstallResult:
    """Install GPU packages and optionally test the setup.

    Args:
        config_path: Optional explicit path to ghostarch.yml.
        skip_test: Don't run nvidia-smi / nvcc / hashcat afterwards.
        dry_run: Validate and log every step, execute nothing.
        mock_mode: Route every step through the mock adapter.
        registry: Optional pre-configured adapter registry.
        audit_writer: Optional audit writer (default: state dir ledger).
    """
    result = GpuInstallResult()
    logger.info("=== Ghostarch NVIDIA/CUDA Setup ===")
    check_environment()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.packages = config.gpu_packages or list(DEFAULT_GPU_PACKAGES)

    registry = registry or build_registry(mock_mode=mock_mode)
    runner = StepRunner(registry, phase="gpu", dry_run=dry_run)
    result.report = runner.report

    try:
        check_sudo(runner)
        install_gpu_packages(runner, result.packages)
        if skip_test:
            logger.info("Skipping GPU test")
        else:
            result.gpu_visible = verify_gpu(runner)
        logger.info("GPU setup complete")
    except InstallAborted as e:
        result.error = str(e)

    write_audit_entry(
        runner.report,
        audit_writer or AuditWriter(),
        duration_ms=runner.elapsed_ms,
        dry_run=dry_run,
        errors=[result.error] if result.error else [],
        context={"packages": result.packages, "gpu_visible": result.gpu_visible},
    )
    return result
