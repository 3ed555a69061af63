"""Polygon geometry for ROIs: area, bounds validation and rasterization.

Coordinates follow the ImageJ convention: vertex ``(x, y)`` is in pixel
units, pixel ``(row, col)`` covers ``[col, col + 1) x [row, row + 1)`` and
its center sits at ``(col + 0.5, row + 0.5)``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from skimage.draw import polygon as sk_polygon

from bbcount.core.exceptions import GeometryError

_BOUNDS_EPSILON = 1e-6


def as_vertex_array(vertices: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Validate vertices and return them as an (N, 2) float array."""
    arr = np.asarray(vertices, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise GeometryError(f"Vertices must be an (N, 2) sequence, got shape {arr.shape}")
    if len(arr) < 3:
        raise GeometryError(f"A polygon needs at least 3 vertices, got {len(arr)}")
    if not np.all(np.isfinite(arr)):
        raise GeometryError("Vertices contain non-finite coordinates")
    return arr


def polygon_area(vertices: Sequence[Sequence[float]] | np.ndarray) -> float:
    """Area enclosed by a simple polygon (shoelace formula).

    Args:
        vertices: ``(x, y)`` pairs, open or closed (last == first).

    Returns:
        Non-negative area in square pixels.
    """
    arr = as_vertex_array(vertices)
    x = arr[:, 0]
    y = arr[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def validate_bounds(
    vertices: Sequence[Sequence[float]] | np.ndarray,
    shape: tuple[int, int],
) -> None:
    """Check that every vertex lies inside an image of ``shape`` (rows, cols).

    Raises:
        GeometryError: If any vertex lies outside ``[0, width] x [0, height]``.
    """
    arr = as_vertex_array(vertices)
    height, width = shape
    x = arr[:, 0]
    y = arr[:, 1]
    outside = (
        (x < -_BOUNDS_EPSILON) | (x > width + _BOUNDS_EPSILON)
        | (y < -_BOUNDS_EPSILON) | (y > height + _BOUNDS_EPSILON)
    )
    if np.any(outside):
        first = arr[np.argmax(outside)]
        raise GeometryError(
            f"Vertex ({first[0]:g}, {first[1]:g}) lies outside the "
            f"{width}x{height} image"
        )


def polygon_mask(
    vertices: Sequence[Sequence[float]] | np.ndarray,
    shape: tuple[int, int],
) -> np.ndarray:
    """Rasterize a polygon into a boolean mask.

    A pixel belongs to the mask when its center lies inside the polygon.

    Args:
        vertices: ``(x, y)`` pairs.
        shape: ``(rows, cols)`` of the target image.

    Returns:
        2D bool array of ``shape``.

    Raises:
        GeometryError: If the polygon is out of bounds or covers no pixel.
    """
    validate_bounds(vertices, shape)
    arr = as_vertex_array(vertices)
    rows = arr[:, 1] - 0.5
    cols = arr[:, 0] - 0.5
    rr, cc = sk_polygon(rows, cols, shape=shape)

    mask = np.zeros(shape, dtype=bool)
    mask[rr, cc] = True
    if not mask.any():
        raise GeometryError("Polygon covers no pixel centers (too small)")
    return mask
