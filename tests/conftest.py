"""Shared fixtures for ahatconfig tests."""

from pathlib import Path

import pytest

from ahatconfig import reset_config
from sample_config import RecordingLogger


@pytest.fixture(autouse=True)
def _reset_global_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def write_toml(tmp_path: Path):
    """Write ``<app>.toml`` into a temp dir and return the directory."""

    def _write(app_name: str, content: str) -> Path:
        (tmp_path / f"{app_name}.toml").write_text(content)
        return tmp_path

    return _write
