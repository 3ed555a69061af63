"""Z-projection transforms for image stacks."""

from __future__ import annotations

import numpy as np

from bbcount.core.exceptions import ShapeError
from bbcount.io.models import Projection, Series


def project_mip(stack: np.ndarray) -> np.ndarray:
    """Maximum intensity projection along axis 0.

    Args:
        stack: 3D array (Z, Y, X).

    Returns:
        2D array (Y, X) with the input dtype.

    Raises:
        ShapeError: If stack is not 3D or has no slices.
    """
    if stack.ndim != 3:
        raise ShapeError(f"Expected a 3D (Z, Y, X) stack, got shape {stack.shape}")
    if stack.shape[0] == 0:
        raise ShapeError("Cannot project an empty stack")
    return np.max(stack, axis=0)


def project_series(series: Series) -> Projection:
    """Project every channel of a series independently.

    Args:
        series: Series with (C, Z, Y, X) data.

    Returns:
        Projection with (C, Y, X) data, channels preserved.
    """
    channels = [project_mip(series.data[c]) for c in range(series.channel_count)]
    return Projection(series_name=series.name, data=np.stack(channels))
