"""Shared fixtures for report module tests."""

from __future__ import annotations

import numpy as np
import pytest

from bbcount.core.models import CellResult, Roi, Spot
from bbcount.io.models import Projection


@pytest.fixture
def projection(spot_stack) -> Projection:
    return Projection(series_name="exp_lng_1", data=spot_stack.max(axis=1))


@pytest.fixture
def rois() -> list[Roi]:
    return [
        Roi(label="Cell_1", vertices=((4.0, 4.0), (13.0, 4.0), (13.0, 13.0), (4.0, 13.0))),
        Roi(label="Cell_2", vertices=((15.0, 4.0), (25.0, 4.0), (25.0, 24.0), (15.0, 24.0))),
    ]


@pytest.fixture
def cells(rois: list[Roi]) -> list[CellResult]:
    return [
        CellResult(roi=rois[0], area=81.0, spots=(Spot(7, 7),)),
        CellResult(roi=rois[1], area=200.0, spots=(Spot(19, 7), Spot(19, 19))),
    ]


@pytest.fixture
def blank_projection() -> Projection:
    return Projection(series_name="blank", data=np.zeros((3, 16, 16), dtype=np.float64))
