"""bbcount napari viewer — optional GUI for drawing cell outlines.

napari is an optional dependency. Install with: ``pip install bbcount[napari]``
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from bbcount.roi.provider import RoiProvider

if TYPE_CHECKING:
    import numpy as np

    from bbcount.io.models import Projection


def _napari_available() -> bool:
    """Check if napari is importable without keeping it in memory."""
    try:
        import napari  # noqa: F401

        return True
    except ImportError:
        return False


NAPARI_AVAILABLE: bool = _napari_available()


class NapariRoiProvider(RoiProvider):
    """Asks the operator to outline cells in a napari window.

    The viewer opens with every projected channel and a ``cells`` Shapes
    layer in polygon mode. Closing the window ends the drawing for the
    current series; closing it without drawing skips the series.

    Raises:
        ImportError: If napari is not installed.
    """

    def __init__(self) -> None:
        if not NAPARI_AVAILABLE:
            raise ImportError(
                "napari is required for interactive ROI drawing. "
                "Install with: pip install 'bbcount[napari]'"
            )

    def request_rois(
        self, projection: Projection, display_channel: int,
    ) -> Sequence[np.ndarray]:
        from bbcount.roi.viewer._viewer import _launch

        return _launch(projection, display_channel)


def shapes_to_polygons(shapes_data, shape_types) -> list[np.ndarray]:  # type: ignore[no-untyped-def]
    """Convert napari Shapes layer data to ``(x, y)`` polygons (headless-safe).

    See :func:`bbcount.roi.viewer._viewer.shapes_to_polygons`.
    """
    from bbcount.roi.viewer._viewer import shapes_to_polygons as _impl

    return _impl(shapes_data, shape_types)


__all__ = ["NAPARI_AVAILABLE", "NapariRoiProvider", "shapes_to_polygons"]
