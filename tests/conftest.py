"""Shared test fixtures for bbcount."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np
import pytest
import tifffile

# Centers (row, col) of the 3x3 bright blocks in ``spot_stack``.
SPOT_CENTERS = ((8, 8), (8, 20), (20, 20))


@pytest.fixture
def spot_stack() -> np.ndarray:
    """(C=2, Z=3, 32, 32) uint16 stack.

    Channel 1 is flat at 100. Channel 2 has a 3x3 block of 1000 around
    each of ``SPOT_CENTERS``, each block on a different z-slice, over a
    zero background.
    """
    data = np.zeros((2, 3, 32, 32), dtype=np.uint16)
    data[0] = 100
    for z, (row, col) in enumerate(SPOT_CENTERS):
        data[1, z, row - 1:row + 2, col - 1:col + 2] = 1000
    return data


@pytest.fixture
def make_tiff_container(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a multi-series TIFF, one (C, Z, Y, X) array per series."""

    def _make(name: str, series: list[np.ndarray], directory: Path | None = None) -> Path:
        directory = directory or tmp_path / "input"
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        with tifffile.TiffWriter(path) as tif:
            for data in series:
                tif.write(data, photometric="minisblack", metadata={"axes": "CZYX"})
        return path

    return _make


@pytest.fixture
def expected_spots():
    """Spots ``spot_stack`` yields: the top-left pixel of each block."""
    from bbcount.core.models import Spot

    return {Spot(x=col - 1, y=row - 1) for row, col in SPOT_CENTERS}
