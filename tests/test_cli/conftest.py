"""Shared fixtures for CLI module tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from bbcount.cli import _recent
from bbcount.core.models import Roi
from bbcount.roi.roi_io import write_roi_zip


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolate_recent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Redirect _recent to use a temp directory instead of ~/.config."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(_recent, "_CONFIG_DIR", config_dir)
    monkeypatch.setattr(_recent, "_RECENT_FILE", config_dir / "recent.json")


@pytest.fixture
def tiff_input(make_tiff_container, spot_stack, tmp_path: Path) -> Path:
    """Input directory with one single-series TIFF container, exp.tif."""
    make_tiff_container("exp.tif", [spot_stack])
    return tmp_path / "input"


@pytest.fixture
def roi_dir(tmp_path: Path) -> Path:
    """Directory holding a RoiSet archive for series exp_Series001."""
    d = tmp_path / "rois"
    d.mkdir()
    write_roi_zip(
        [
            Roi("Cell_1", ((4.0, 4.0), (13.0, 4.0), (13.0, 13.0), (4.0, 13.0))),
            Roi("Cell_2", ((15.0, 4.0), (25.0, 4.0), (25.0, 24.0), (15.0, 24.0))),
        ],
        d / "exp_Series001_RoiSet.zip",
    )
    return d
