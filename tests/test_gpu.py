"""
Tests for the NVIDIA/CUDA setup.
"""

import os
import time

import pytest

from ghostarch.adapters.mock import MockAdapter
from ghostarch.adapters.registry import AdapterRegistry
from ghostarch.adapters.shell.command import ShellCommandAdapter
from ghostarch.core.engine.executor import InstallAborted, StepRunner
from ghostarch.core.models.action import Receipt
from ghostarch.core.services import gpu
from ghostarch.core.services.gpu import DEFAULT_GPU_PACKAGES, install_gpu_packages, verify_gpu


class TestInstallGpuPackages:
    def test_install(self, runner: StepRunner, mock_adapter: MockAdapter):
        install_gpu_packages(runner, DEFAULT_GPU_PACKAGES)
        params = mock_adapter.calls_named("install-gpu-packages")[0].action.params
        assert params["packages"] == ["nvidia", "nvidia-utils", "cuda", "cuda-tools", "hashcat"]
        assert params["sudo"] is True

    def test_failure_aborts(self, runner: StepRunner, mock_adapter: MockAdapter):
        mock_adapter.set_failure("install-gpu-packages")
        with pytest.raises(InstallAborted, match="Failed to install NVIDIA packages"):
            install_gpu_packages(runner, ["nvidia"])


class TestVerifyGpu:
    def test_no_nvidia_smi(self, runner: StepRunner, mock_adapter: MockAdapter, monkeypatch):
        monkeypatch.setattr(gpu, "command_available", lambda name: False)
        assert verify_gpu(runner) is False
        assert mock_adapter.call_count == 0
        assert runner.report.warnings[0].startswith("nvidia-smi not found")

    def test_runs_checks(self, runner: StepRunner, mock_adapter: MockAdapter, monkeypatch):
        monkeypatch.setattr(gpu, "command_available", lambda name: True)
        assert verify_gpu(runner) is True
        assert mock_adapter.step_names() == ["nvidia-smi", "nvcc-version", "hashcat-benchmark"]
        bench = mock_adapter.calls_named("hashcat-benchmark")[0].action.params
        assert bench["argv"] == ["hashcat", "--benchmark", "--benchmark-all"]
        assert bench["max_lines"] == gpu.BENCHMARK_LINES
        assert bench["timeout"] == gpu.BENCHMARK_TIMEOUT

    def test_benchmark_output_truncated(self, runner: StepRunner, mock_adapter: MockAdapter, monkeypatch, caplog):
        monkeypatch.setattr(gpu, "command_available", lambda name: True)
        output = "\n".join(f"line-{i:02d}" for i in range(1, 31))
        mock_adapter.set_response(
            "hashcat-benchmark", Receipt.success(adapter="shell", action_id="x", output=output)
        )
        with caplog.at_level("INFO"):
            verify_gpu(runner)
        assert "line-20" in caplog.text
        assert "line-21" not in caplog.text

    def test_benchmark_stops_after_head(self, tmp_path, monkeypatch, caplog):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        scripts = {
            "nvidia-smi": "echo 'GPU 0: Fake RTX'",
            "nvcc": "echo 'Cuda compilation tools, release 12.4'",
            "hashcat": "for i in $(seq 1 40); do echo bench-$i; done\nexec sleep 30",
        }
        for name, body in scripts.items():
            script = bin_dir / name
            script.write_text(f"#!/bin/sh\n{body}\n")
            script.chmod(0o755)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
        monkeypatch.setattr(gpu, "command_available", lambda name: True)
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        runner = StepRunner(registry, phase="gpu", operation_id="op-gpu")

        start = time.monotonic()
        with caplog.at_level("INFO"):
            assert verify_gpu(runner) is True
        assert time.monotonic() - start < 15
        assert "bench-20" in caplog.text
        assert "bench-21" not in caplog.text
        assert runner.report.warnings == []

    def test_nvcc_failure_warns(self, runner: StepRunner, mock_adapter: MockAdapter, monkeypatch):
        monkeypatch.setattr(gpu, "command_available", lambda name: True)
        mock_adapter.set_failure("nvcc-version")
        assert verify_gpu(runner) is True
        assert any(w.startswith("nvcc not found or failed") for w in runner.report.warnings)
        assert "hashcat-benchmark" in mock_adapter.step_names()
