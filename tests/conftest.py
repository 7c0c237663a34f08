"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from ghostarch.adapters.mock import MockAdapter
from ghostarch.adapters.registry import AdapterRegistry
from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.persistence.audit import AuditWriter


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    """Keep every test away from the real home, config and skip flags."""
    state_dir = tmp_path / "state"
    monkeypatch.setenv("GHOSTARCH_HOME", str(state_dir))
    for var in (
        "GHOSTARCH_CONFIG",
        "GHOSTARCH_MANIFEST",
        "GHOSTARCH_LOG_FILE",
        "GHOSTARCH_LOG_LEVEL",
        "ZSH_CUSTOM",
        "SKIP_NETWORKING",
        "SKIP_PROGRAMMING",
        "SKIP_PENTEST",
        "SKIP_RECON",
        "SKIP_ADDITIONAL",
    ):
        monkeypatch.delenv(var, raising=False)
    work = tmp_path / "cwd"
    work.mkdir()
    monkeypatch.chdir(work)
    return state_dir


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def registry(mock_adapter: MockAdapter) -> AdapterRegistry:
    """Registry that routes every step to ``mock_adapter``."""
    return AdapterRegistry(mock_mode=True, mock_adapter=mock_adapter)


@pytest.fixture
def runner(registry: AdapterRegistry) -> StepRunner:
    return StepRunner(registry, phase="test", operation_id="op-test")


@pytest.fixture
def audit_writer(tmp_path: Path) -> AuditWriter:
    return AuditWriter(path=tmp_path / "audit.ndjson")


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the handlers ``setup_logging`` installs during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
