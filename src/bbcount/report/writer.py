"""SeriesReportWriter — per-series output files and the consolidated table.

Per-series files are staged under temporary names and only renamed into
place once every file of the series has been written, so a failed or
cancelled series never leaves partial outputs behind.
"""

from __future__ import annotations

import csv
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from bbcount.core.exceptions import OutputPathError
from bbcount.core.models import CellResult, ResultRow, ResultTable, Roi
from bbcount.io.models import Projection

logger = logging.getLogger(__name__)

COORDS_DIRNAME = "X_Y_Coords"
RESULTS_FILENAME = "Full_Results.csv"
_STAGING_SUFFIX = ".partial"


def spots_path(output_dir: Path, series_name: str) -> Path:
    return output_dir / f"{series_name}_spots.tiff"


def overlay_path(output_dir: Path, series_name: str) -> Path:
    return output_dir / f"{series_name}_CellOverlay.tiff"


def roiset_path(output_dir: Path, series_name: str) -> Path:
    return output_dir / f"{series_name}_RoiSet.zip"


def coords_path(output_dir: Path, series_name: str, cell_number: int) -> Path:
    return output_dir / COORDS_DIRNAME / f"{series_name}_Cell{cell_number}.csv"


def prepare_output_dir(output_dir: Path) -> Path:
    """Create the output tree and check that it is writable.

    Raises:
        OutputPathError: If the directory cannot be created or written.
    """
    output_dir = Path(output_dir)
    try:
        (output_dir / COORDS_DIRNAME).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputPathError(str(output_dir), exc.strerror or str(exc)) from exc
    if not os.access(output_dir, os.W_OK | os.X_OK):
        raise OutputPathError(str(output_dir), "permission denied")
    return output_dir


@dataclass
class _Staging:
    """Staged ``(temporary, final)`` path pairs for one series."""

    pairs: list[tuple[Path, Path]] = field(default_factory=list)

    def path_for(self, final: Path) -> Path:
        # Keep the real suffix last; writers pick the format from it
        staged = final.with_name(f"{final.stem}{_STAGING_SUFFIX}{final.suffix}")
        self.pairs.append((staged, final))
        return staged

    def commit(self) -> list[Path]:
        for staged, final in self.pairs:
            os.replace(staged, final)
        return [final for _, final in self.pairs]

    def discard(self) -> None:
        for staged, _ in self.pairs:
            try:
                staged.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Could not remove staged file %s: %s", staged, exc)


class SeriesReportWriter:
    """Writes every per-series output for series with at least one ROI.

    Args:
        output_dir: Root of the output tree (created if missing).
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = prepare_output_dir(output_dir)

    def write_series(
        self,
        projection: Projection,
        quant_channel: int,
        cells: list[CellResult],
        rois: list[Roi],
        pixel_size_um: float | None = None,
    ) -> list[Path]:
        """Write composite, overlay, ROI archive and coordinate tables.

        Coordinate tables left in the output tree by an earlier run of the
        same series are removed, so the tree holds one table per valid cell.

        Args:
            projection: Projection of the series.
            quant_channel: 1-indexed channel shown in the spot composite.
            cells: Per-cell results (valid ROIs only).
            rois: All ROIs of the series, in creation order.
            pixel_size_um: Calibration stored in both TIFFs, when known.

        Returns:
            Final paths of every file written.
        """
        with self._staged() as staging:
            self._write_all(staging, projection, quant_channel, cells, rois, pixel_size_um)
            written = staging.commit()
        self._remove_stale_coordinates(projection.series_name, set(written))
        logger.info("Wrote %d file(s) for %s", len(written), projection.series_name)
        return written

    @contextmanager
    def _staged(self) -> Iterator[_Staging]:
        staging = _Staging()
        try:
            yield staging
        except BaseException:
            staging.discard()
            raise

    def _write_all(
        self,
        staging: _Staging,
        projection: Projection,
        quant_channel: int,
        cells: list[CellResult],
        rois: list[Roi],
        pixel_size_um: float | None,
    ) -> None:
        import tifffile

        from bbcount.report.render import cell_overlay, spot_composite
        from bbcount.roi.roi_io import write_roi_zip

        name = projection.series_name
        all_spots = [spot for cell in cells for spot in cell.spots]

        resolution, unit = _imagej_calibration(pixel_size_um)

        composite = spot_composite(projection.channel(quant_channel), all_spots)
        tifffile.imwrite(
            staging.path_for(spots_path(self.output_dir, name)),
            composite,
            imagej=True,
            resolution=resolution,
            metadata={"axes": "CYX", "mode": "composite", **unit},
        )

        tifffile.imwrite(
            staging.path_for(overlay_path(self.output_dir, name)),
            cell_overlay(projection.data, rois),
            imagej=True,
            photometric="rgb",
            resolution=resolution,
            metadata=unit,
        )

        write_roi_zip(rois, staging.path_for(roiset_path(self.output_dir, name)))

        numbers = {roi.label: i for i, roi in enumerate(rois, start=1)}
        for cell in cells:
            write_coordinates(
                cell,
                staging.path_for(coords_path(self.output_dir, name, numbers[cell.roi.label])),
            )

    def _remove_stale_coordinates(self, series_name: str, keep: set[Path]) -> None:
        pattern = re.compile(rf"{re.escape(series_name)}_Cell\d+\.csv")
        for path in (self.output_dir / COORDS_DIRNAME).glob(f"{series_name}_Cell*.csv"):
            if path in keep or not pattern.fullmatch(path.name):
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Could not remove stale coordinates %s: %s", path, exc)
            else:
                logger.info("Removed stale coordinates %s", path.name)


def _imagej_calibration(
    pixel_size_um: float | None,
) -> tuple[tuple[float, float] | None, dict[str, str]]:
    """ImageJ resolution (pixels per µm) and unit metadata for a pixel size."""
    if not pixel_size_um or pixel_size_um <= 0:
        return None, {}
    pixels_per_um = 1.0 / pixel_size_um
    return (pixels_per_um, pixels_per_um), {"unit": "um"}


def write_coordinates(cell: CellResult, path: Path) -> None:
    """Write one cell's spot coordinates as an ``X,Y`` CSV."""
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["X", "Y"])
        for spot in cell.spots:
            writer.writerow([spot.x, spot.y])


def write_results_table(rows: ResultTable | Iterable[ResultRow], path: Path) -> None:
    """Atomically write the consolidated results table, replacing any old file."""
    table = rows if isinstance(rows, ResultTable) else ResultTable(rows)
    path = Path(path)
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="") as f:
            table.to_dataframe().to_csv(f, index=False)
        os.replace(tmp, path)
    except BaseException:
        # Clean up temp file on failure
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def read_results_table(path: Path) -> ResultTable:
    """Read a consolidated results table written by write_results_table."""
    import pandas as pd

    df = pd.read_csv(path)
    return ResultTable(
        ResultRow(
            filename=str(r.Filename),
            cell=str(r.Cell),
            n_spots=int(r.No_Spots),
            roi_area=float(r.ROI_Area),
        )
        for r in df.itertuples(index=False)
    )
