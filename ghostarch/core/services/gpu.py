"""
NVIDIA/CUDA packages and a quick sanity check of the GPU stack.
"""

from __future__ import annotations

import logging

from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.services.system_checks import command_available

logger = logging.getLogger(__name__)

DEFAULT_GPU_PACKAGES = ["nvidia", "nvidia-utils", "cuda", "cuda-tools", "hashcat"]

BENCHMARK_LINES = 20
BENCHMARK_TIMEOUT = 120


def install_gpu_packages(runner: StepRunner, packages: list[str]) -> None:
    """Install the driver, CUDA and hashcat. A failure aborts."""
    logger.info("Installing NVIDIA drivers and CUDA: %s", " ".join(packages))
    runner.run(
        "pacman",
        "install-gpu-packages",
        {"operation": "install", "packages": packages, "sudo": True, "stream": True},
        on_failure="abort",
        message="Failed to install NVIDIA packages",
    )
    logger.info("NVIDIA packages installed")


def verify_gpu(runner: StepRunner) -> bool:
    """Run nvidia-smi, nvcc and a short hashcat benchmark.

    Returns:
        False when nvidia-smi isn't available, True otherwise.
    """
    logger.info("Testing GPU setup...")

    if not command_available("nvidia-smi"):
        runner.warn("nvidia-smi not found - GPU may not be accessible in WSL2")
        logger.info("Ensure the NVIDIA driver for WSL is installed on the Windows host")
        return False

    smi = runner.run("shell", "nvidia-smi", {"argv": ["nvidia-smi"]}, message="nvidia-smi failed")
    if smi.ok and smi.output:
        logger.info("GPU status:\n%s", smi.output)

    nvcc = runner.run(
        "shell",
        "nvcc-version",
        {"argv": ["nvcc", "--version"]},
        message="nvcc not found or failed",
    )
    if nvcc.ok and nvcc.output:
        logger.info("CUDA compiler:\n%s", nvcc.output)

    logger.info("Running hashcat benchmark (quick test)...")
    bench = runner.run(
        "shell",
        "hashcat-benchmark",
        {
            "argv": ["hashcat", "--benchmark", "--benchmark-all"],
            "max_lines": BENCHMARK_LINES,
            "timeout": BENCHMARK_TIMEOUT,
        },
        message="Hashcat benchmark failed",
    )
    if bench.ok and bench.output:
        head = "\n".join(bench.output.splitlines()[:BENCHMARK_LINES])
        logger.info("Hashcat benchmark:\n%s", head)

    return True
