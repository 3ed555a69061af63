"""Shared fixtures for ROI module tests."""

from __future__ import annotations

import numpy as np
import pytest

from bbcount.core.models import Roi
from bbcount.io.models import Projection


@pytest.fixture
def square() -> list[tuple[float, float]]:
    """10x10 square with its corner at the origin."""
    return [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


@pytest.fixture
def rois() -> list[Roi]:
    """Two labelled ROIs, one with subpixel vertices."""
    return [
        Roi(label="Cell_1", vertices=((2.0, 2.0), (12.0, 2.0), (12.0, 12.0), (2.0, 12.0))),
        Roi(label="Cell_2", vertices=((15.5, 4.25), (25.0, 4.0), (20.75, 18.5))),
    ]


@pytest.fixture
def projection() -> Projection:
    """Two-channel 32x32 projection named exp_lng_1."""
    data = np.zeros((2, 32, 32), dtype=np.uint16)
    data[1, 10:12, 10:12] = 500
    return Projection(series_name="exp_lng_1", data=data)
