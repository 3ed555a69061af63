"""Image rendering for reports: spot composite and flattened cell overlay."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from bbcount.core.models import Roi, Spot

# ImageJ composite default LUT order, as RGB weights.
CHANNEL_COLORS: tuple[tuple[float, float, float], ...] = (
    (1.0, 0.0, 0.0),  # red
    (0.0, 1.0, 0.0),  # green
    (0.0, 0.0, 1.0),  # blue
    (1.0, 1.0, 1.0),  # gray
    (0.0, 1.0, 1.0),  # cyan
    (1.0, 0.0, 1.0),  # magenta
    (1.0, 1.0, 0.0),  # yellow
)

OUTLINE_COLOR = (255, 255, 0)
LABEL_COLOR = (255, 255, 255)

_STRETCH_PERCENTILES = (0.35, 99.65)


def spot_layer(shape: tuple[int, int], spots: Iterable[Spot], dtype: np.dtype) -> np.ndarray:
    """Single-point rendering of spots: max value at each spot, 0 elsewhere."""
    dtype = np.dtype(dtype)
    layer = np.zeros(shape, dtype=dtype)
    on = np.iinfo(dtype).max if np.issubdtype(dtype, np.integer) else 1.0
    for spot in spots:
        layer[spot.y, spot.x] = on
    return layer


def spot_composite(plane: np.ndarray, spots: Iterable[Spot]) -> np.ndarray:
    """Two-channel ``(C, Y, X)`` stack: source plane and its spot layer.

    Output dtype is one ImageJ can store: uint8 and uint16 are kept,
    everything else becomes float32.
    """
    if plane.dtype in (np.uint8, np.uint16):
        data = plane
    else:
        data = plane.astype(np.float32)
    return np.stack([data, spot_layer(data.shape, spots, data.dtype)])


def _stretch(plane: np.ndarray) -> np.ndarray:
    """Scale a plane to 0..1 using saturated percentiles."""
    plane = plane.astype(np.float64)
    lo, hi = np.percentile(plane, _STRETCH_PERCENTILES)
    if hi <= lo:
        hi = lo + 1.0
    return np.clip((plane - lo) / (hi - lo), 0.0, 1.0)


def colorize(data: np.ndarray) -> np.ndarray:
    """Blend ``(C, Y, X)`` channels additively into an RGB uint8 image."""
    rgb = np.zeros(data.shape[1:] + (3,), dtype=np.float64)
    for index, plane in enumerate(data):
        color = np.asarray(CHANNEL_COLORS[index % len(CHANNEL_COLORS)])
        rgb += _stretch(plane)[..., None] * color
    return (np.clip(rgb, 0.0, 1.0) * 255).astype(np.uint8)


def cell_overlay(data: np.ndarray, rois: Sequence[Roi], line_width: int = 1) -> np.ndarray:
    """Flattened RGB projection with ROI outlines and labels burned in.

    Args:
        data: ``(C, Y, X)`` projection.
        rois: ROIs to outline, labelled at their vertex centroid.
        line_width: Outline width in pixels.

    Returns:
        ``(Y, X, 3)`` uint8 array.
    """
    from PIL import Image, ImageDraw

    image = Image.fromarray(colorize(data))
    draw = ImageDraw.Draw(image)
    for roi in rois:
        points = [(float(x), float(y)) for x, y in roi.vertices]
        draw.line(points + [points[0]], fill=OUTLINE_COLOR, width=line_width)
        cx = sum(p[0] for p in points) / len(points)
        cy = sum(p[1] for p in points) / len(points)
        left, top, right, bottom = draw.textbbox((0, 0), roi.label)
        draw.text(
            (cx - (right - left) / 2, cy - (bottom - top) / 2), roi.label, fill=LABEL_COLOR,
        )
    return np.asarray(image)
