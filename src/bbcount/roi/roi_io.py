"""ImageJ RoiSet.zip export and import via roifile."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np

from bbcount.core.exceptions import FormatError
from bbcount.core.models import Roi

logger = logging.getLogger(__name__)


def _to_imagej_roi(roi: Roi):  # type: ignore[no-untyped-def]
    from roifile import ROI_TYPE, ImagejRoi

    points = np.asarray(roi.vertices, dtype=np.float64)
    if np.all(points == np.round(points)):
        points = points.astype(np.int32)
    else:
        points = points.astype(np.float32)

    ij_roi = ImagejRoi.frompoints(points, name=roi.label)
    ij_roi.roitype = ROI_TYPE.POLYGON
    return ij_roi


def write_roi_zip(rois: Sequence[Roi], path: Path) -> None:
    """Write polygons to an ImageJ ROI archive, one entry per ROI.

    Args:
        rois: ROIs in display order; labels become entry names.
        path: Target ``.zip`` path. An existing file is replaced.

    Raises:
        ValueError: If rois is empty or labels are not unique.
    """
    from roifile import roiwrite

    if not rois:
        raise ValueError("Cannot write an empty ROI archive")
    labels = [roi.label for roi in rois]
    if len(set(labels)) != len(labels):
        raise ValueError(f"ROI labels must be unique, got {labels}")

    path = Path(path)
    if path.exists():
        path.unlink()
    roiwrite(str(path), [_to_imagej_roi(roi) for roi in rois], mode="w")


def read_roi_zip(path: Path) -> list[Roi]:
    """Read an ImageJ ROI archive (or single ``.roi`` file) back into Rois.

    Entries keep their archive order. Unnamed entries are labelled
    ``Cell_<n>`` by position.

    Raises:
        FileNotFoundError: If path does not exist.
        FormatError: If the file is not a readable ROI archive.
    """
    from roifile import roiread

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"ROI archive not found: {path}")

    try:
        entries = roiread(str(path))
    except Exception as exc:
        raise FormatError(str(path), str(exc)) from exc
    if not isinstance(entries, list):
        entries = [entries]

    rois: list[Roi] = []
    for i, entry in enumerate(entries, start=1):
        coords = np.asarray(entry.coordinates(), dtype=np.float64)
        if coords.ndim != 2 or len(coords) < 3:
            logger.warning(
                "Skipping ROI %d in %s: not a polygon (%d points)",
                i, path.name, len(coords),
            )
            continue
        label = entry.name or f"Cell_{i}"
        rois.append(
            Roi(label=label, vertices=tuple((float(x), float(y)) for x, y in coords))
        )
    return rois
