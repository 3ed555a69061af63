"""Shared fixtures for core module tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bbcount.core.models import CellResult, Roi, Spot


@pytest.fixture
def square_roi() -> Roi:
    """10x10 square ROI labelled Cell_1."""
    return Roi(label="Cell_1", vertices=((0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)))


@pytest.fixture
def cell_result(square_roi: Roi) -> CellResult:
    return CellResult(roi=square_roi, area=100.0, spots=(Spot(1, 2), Spot(5, 5)))


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "bbcount.yaml"
