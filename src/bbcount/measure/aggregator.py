"""CellAggregator — per-ROI area and spot counting for one series."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np

from bbcount.core.exceptions import GeometryError
from bbcount.core.models import CellResult, ResultRow, Roi
from bbcount.measure.spots import SpotDetector
from bbcount.roi.geometry import polygon_area, polygon_mask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    """Per-cell results for one series.

    Attributes:
        series_name: Name of the series the ROIs belong to.
        cells: One CellResult per valid ROI, in ROI order.
        rejected: ``(label, reason)`` for ROIs that did not fit the image.
    """

    series_name: str
    cells: list[CellResult] = field(default_factory=list)
    rejected: list[tuple[str, str]] = field(default_factory=list)

    def to_rows(self) -> list[ResultRow]:
        """Convert cell results into consolidated-table rows."""
        return [
            ResultRow(
                filename=self.series_name,
                cell=cell.roi.label,
                n_spots=cell.n_spots,
                roi_area=cell.area,
            )
            for cell in self.cells
        ]


class CellAggregator:
    """Counts spots inside each ROI of a series.

    The plane is filtered once; every ROI then queries the prepared maxima
    with its own rasterized mask.

    Args:
        detector: Configured SpotDetector.
        tolerance: Prominence tolerance for maxima.
    """

    def __init__(self, detector: SpotDetector, tolerance: float) -> None:
        self._detector = detector
        self._tolerance = tolerance

    def aggregate(
        self,
        series_name: str,
        plane: np.ndarray,
        rois: Sequence[Roi],
        on_cell: Callable[[int, CellResult], None] | None = None,
    ) -> AggregationResult:
        """Measure every ROI in order.

        Args:
            series_name: Series the plane belongs to (used in logs and rows).
            plane: 2D quantification channel.
            rois: ROIs in creation order.
            on_cell: Optional callback(index, cell) after each ROI.

        Returns:
            AggregationResult with per-cell results and rejected ROIs.
        """
        prepared = self._detector.prepare(plane, self._tolerance)
        result = AggregationResult(series_name=series_name)

        for index, roi in enumerate(rois):
            try:
                mask = polygon_mask(roi.vertices, plane.shape)
            except GeometryError as exc:
                logger.warning(
                    "Skipping ROI %s on %s: %s", roi.label, series_name, exc,
                )
                result.rejected.append((roi.label, str(exc)))
                continue

            spots = tuple(sorted(prepared.spots_in(mask)))
            cell = CellResult(roi=roi, area=polygon_area(roi.vertices), spots=spots)
            result.cells.append(cell)
            logger.debug(
                "%s %s: area=%.1f spots=%d", series_name, roi.label, cell.area, cell.n_spots,
            )
            if on_cell is not None:
                on_cell(index, cell)

        return result
