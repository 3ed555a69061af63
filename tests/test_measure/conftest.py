"""Shared fixtures for measure module tests."""

from __future__ import annotations

import numpy as np
import pytest

from bbcount.measure.spots import SpotDetector


@pytest.fixture
def bright_pixel() -> np.ndarray:
    """3x3 flat image with a single bright pixel in the center."""
    image = np.zeros((3, 3), dtype=np.uint16)
    image[1, 1] = 10
    return image


@pytest.fixture
def spot_plane(spot_stack) -> np.ndarray:
    """Maximum projection of the spot channel of ``spot_stack``."""
    return spot_stack[1].max(axis=0)


@pytest.fixture
def raw_detector() -> SpotDetector:
    """Detector with both filters disabled."""
    return SpotDetector(top_hat_radius=0, median_radius=0)
