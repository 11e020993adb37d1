"""Pytest configuration and shared fixtures.

No sys.path hacks - tests import from the installed provguard package.
"""

import json
import logging
from pathlib import Path

import pytest

from provguard.kernel.config import Configuration, build_configuration
from provguard.recorder import ProvenanceRecorder


FAKE_COMMIT = "0123456789abcdef0123456789abcdef01234567"

TEMPLATE = {
    "data_path": "<PLACEHOLDER>",
    "env_path": "<PATH_TO_ENV>",
    "log_level": "INFO",
    "random_seed": "<SEED>",
}


def write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def fake_git(monkeypatch):
    """Pin the recorded git commit so sidecars are predictable."""
    monkeypatch.setattr("provguard.recorder.read_git_commit", lambda repo_dir=None: FAKE_COMMIT)
    return FAKE_COMMIT


@pytest.fixture
def template_path(tmp_path: Path) -> Path:
    return write_json(tmp_path / "config.template.json", TEMPLATE)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """A filled-in configuration whose data root is tmp_path/data."""
    return write_json(tmp_path / "config.json", {
        "data_path": "data",
        "env_path": "envs/analysis",
        "log_level": "info",
        "random_seed": 42,
    })


@pytest.fixture
def config(tmp_path: Path) -> Configuration:
    data_root = tmp_path / "data"
    (data_root / "raw").mkdir(parents=True)
    return build_configuration(
        {"data_path": str(data_root), "log_level": "DEBUG", "random_seed": 7},
        base_dir=tmp_path,
        source="test-config",
    )


@pytest.fixture
def recorder(fake_git) -> ProvenanceRecorder:
    return ProvenanceRecorder(
        software={"numpy": "1.26.4"},
        description="test run",
        script_path="analysis/preprocess.py",
    )


@pytest.fixture
def restore_logging():
    """Undo setup_logging's changes to the root logger after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
