"""Internal napari viewer implementation — channel layers and polygon readout."""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    import napari

    from bbcount.io.models import Projection

logger = logging.getLogger(__name__)

ROI_LAYER_NAME = "cells"

# ImageJ composite default LUT order.
CHANNEL_COLORMAPS: tuple[str, ...] = (
    "red", "green", "blue", "gray", "cyan", "magenta", "yellow",
)

_POLYGON_TYPES = frozenset({"polygon", "rectangle"})


def _channel_colormap(index: int) -> str:
    """Colormap name for 0-based channel ``index``."""
    return CHANNEL_COLORMAPS[index % len(CHANNEL_COLORMAPS)]


def _launch(projection: Projection, display_channel: int) -> list[np.ndarray]:
    """Internal launch implementation. Called by NapariRoiProvider."""
    import napari

    # --- Pre-flight validation ---
    if sys.platform not in ("darwin", "win32") and not (
        os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")
    ):
        raise RuntimeError(
            "napari requires a display server. "
            "Set DISPLAY (X11) or WAYLAND_DISPLAY, or use X11 forwarding."
        )

    viewer = napari.Viewer(
        title=f"bbcount: {projection.series_name} (outline cells, then close)"
    )
    _load_channel_layers(viewer, projection, display_channel)
    shapes = _add_roi_layer(viewer)

    # --- Block until viewer closes ---
    napari.run()

    polygons = shapes_to_polygons(shapes.data, shapes.shape_type)
    logger.info(
        "Operator drew %d polygon(s) on %s", len(polygons), projection.series_name,
    )
    return polygons


def _load_channel_layers(
    viewer: napari.Viewer,
    projection: Projection,
    display_channel: int,
) -> None:
    """Add one image layer per channel; only the display channel is visible."""
    for index in range(projection.channel_count):
        number = index + 1
        viewer.add_image(
            projection.data[index],
            name=f"C{number}",
            colormap=_channel_colormap(index),
            blending="additive",
            visible=number == display_channel,
        )


def _add_roi_layer(viewer: napari.Viewer):  # type: ignore[no-untyped-def]
    """Add the Shapes layer the operator draws into and activate it."""
    shapes = viewer.add_shapes(
        name=ROI_LAYER_NAME,
        shape_type="polygon",
        edge_color="yellow",
        edge_width=2,
        face_color="transparent",
    )
    shapes.mode = "add_polygon"
    viewer.layers.selection.active = shapes
    return shapes


def shapes_to_polygons(
    shapes_data: Sequence[np.ndarray],
    shape_types: Sequence[str],
) -> list[np.ndarray]:
    """Convert napari shapes to ``(x, y)`` polygons in creation order.

    napari stores vertices as ``(row, col)`` with pixel centers on integer
    coordinates; the returned vertices use the pixel-edge convention of
    :mod:`bbcount.roi.geometry`, so ``x = col + 0.5`` and ``y = row + 0.5``.
    Shapes that are not polygons or rectangles are ignored.
    """
    polygons: list[np.ndarray] = []
    for i, (data, shape_type) in enumerate(zip(shapes_data, shape_types)):
        if shape_type not in _POLYGON_TYPES:
            logger.warning("Ignoring shape %d: %s is not a polygon", i + 1, shape_type)
            continue
        vertices = np.asarray(data, dtype=np.float64)
        rows = vertices[:, -2]
        cols = vertices[:, -1]
        polygons.append(np.column_stack([cols + 0.5, rows + 0.5]))
    return polygons
