"""ROI acquisition gate: the provider interface and non-GUI providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Mapping, Sequence, Union

import numpy as np

from bbcount.core.exceptions import GeometryError
from bbcount.core.models import Roi
from bbcount.io.models import Projection
from bbcount.roi.geometry import as_vertex_array

logger = logging.getLogger(__name__)

Polygon = Union[Roi, Sequence[Sequence[float]], np.ndarray]


def cell_label(index: int) -> str:
    """Label for the ROI at 0-based creation ``index``."""
    return f"Cell_{index + 1}"


class RoiProvider(ABC):
    """Supplies cell outlines for a projected series.

    ``request_rois`` blocks until the outlines for the current series are
    final. Returning an empty list means "skip this image".
    """

    @abstractmethod
    def request_rois(
        self, projection: Projection, display_channel: int,
    ) -> Sequence[Polygon]:
        """Return polygons drawn over ``projection`` in creation order.

        Args:
            projection: The projected series shown to the operator.
            display_channel: 1-indexed channel to show in front.

        Returns:
            Polygons as ``(x, y)`` vertex sequences or Roi objects.
        """


def acquire_rois(
    provider: RoiProvider,
    projection: Projection,
    display_channel: int,
) -> list[Roi]:
    """Run the ROI gate for one series and label the result.

    Degenerate polygons are dropped with a warning. Kept polygons are
    labelled ``Cell_1..Cell_k`` in creation order.

    Returns:
        Labelled ROIs; empty when the operator skipped the series.
    """
    polygons = provider.request_rois(projection, display_channel)
    rois: list[Roi] = []
    for i, polygon in enumerate(polygons):
        vertices = polygon.vertices if isinstance(polygon, Roi) else polygon
        try:
            arr = as_vertex_array(vertices)
        except GeometryError as exc:
            logger.warning(
                "Ignoring polygon %d on %s: %s", i + 1, projection.series_name, exc,
            )
            continue
        rois.append(
            Roi(
                label=cell_label(len(rois)),
                vertices=tuple((float(x), float(y)) for x, y in arr),
            )
        )

    if not rois:
        logger.info("No ROIs for %s; skipping series.", projection.series_name)
    return rois


class StaticRoiProvider(RoiProvider):
    """Programmatic provider for scripts and tests.

    Args:
        source: Either a mapping of series name to polygons, or a callable
            ``(projection) -> polygons``. Series missing from a mapping are
            skipped.
    """

    def __init__(
        self,
        source: Mapping[str, Sequence[Polygon]] | Callable[[Projection], Sequence[Polygon]],
    ) -> None:
        self._source = source
        self.requests: list[str] = []

    def request_rois(
        self, projection: Projection, display_channel: int,
    ) -> Sequence[Polygon]:
        self.requests.append(projection.series_name)
        if callable(self._source):
            return list(self._source(projection))
        return list(self._source.get(projection.series_name, []))


class RoiZipProvider(RoiProvider):
    """Re-uses ``<series>_RoiSet.zip`` archives from an earlier run.

    A series without an archive is skipped, the same as an operator
    supplying no outlines.

    Args:
        roi_dir: Directory holding the archives (usually a previous output
            directory).
    """

    SUFFIX = "_RoiSet.zip"

    def __init__(self, roi_dir: Path) -> None:
        self._roi_dir = Path(roi_dir)
        if not self._roi_dir.is_dir():
            raise FileNotFoundError(f"ROI directory does not exist: {self._roi_dir}")

    def request_rois(
        self, projection: Projection, display_channel: int,
    ) -> Sequence[Polygon]:
        from bbcount.roi.roi_io import read_roi_zip

        path = self._roi_dir / f"{projection.series_name}{self.SUFFIX}"
        if not path.exists():
            logger.info("No ROI archive for %s in %s", projection.series_name, self._roi_dir)
            return []
        return read_roi_zip(path)
