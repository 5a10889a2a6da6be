"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from dustpan.models.config import ScanConfiguration

DAY = 86400


@pytest.fixture
def now() -> float:
    return time.time()


@pytest.fixture
def isolate_xdg(tmp_path, monkeypatch):
    """Redirect HOME and the XDG config/data directories to a temp tree."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", staticmethod(lambda: home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    return home


@pytest.fixture
def make_file(now):
    """Create a file whose access time lies *days_old* days in the past."""

    def _make(path: Path, days_old: float, content: bytes = b"x") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        stamp = now - days_old * DAY - 60
        os.utime(path, (stamp, stamp))
        return path

    return _make


@pytest.fixture
def custom_only():
    """Build a configuration that scans only the given dirs, ignoring Downloads and friends."""

    def _config(*dirs: Path, threshold_days: int = 14, smart_filter: bool = True) -> ScanConfiguration:
        return ScanConfiguration(
            threshold_days=threshold_days,
            downloads=False,
            documents=False,
            desktop=False,
            custom_directories=tuple(str(d) for d in dirs),
            smart_filter=smart_filter,
        )

    return _config
