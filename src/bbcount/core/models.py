"""Data models for the bbcount core module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:
    import pandas as pd

RESULT_COLUMNS = ["Filename", "Cell", "No_Spots", "ROI_Area"]


@dataclass(frozen=True)
class Roi:
    """An operator-drawn closed polygon around one cell.

    Vertices are ``(x, y)`` pairs in pixel coordinates of the projection.
    """

    label: str
    vertices: tuple[tuple[float, float], ...]

    @property
    def area(self) -> float:
        """Polygon area in pixels (shoelace formula)."""
        from bbcount.roi.geometry import polygon_area

        return polygon_area(self.vertices)


@dataclass(frozen=True, order=True)
class Spot:
    """A detected local maximum at pixel column ``x``, row ``y``."""

    x: int
    y: int


@dataclass(frozen=True)
class CellResult:
    """Spot detection result for one ROI."""

    roi: Roi
    area: float
    spots: tuple[Spot, ...]

    @property
    def n_spots(self) -> int:
        return len(self.spots)


@dataclass(frozen=True)
class ResultRow:
    """One row of the consolidated results table."""

    filename: str
    cell: str
    n_spots: int
    roi_area: float

    def as_record(self) -> dict[str, object]:
        return dict(zip(RESULT_COLUMNS, (self.filename, self.cell, self.n_spots, self.roi_area)))


class ResultTable:
    """Append-only, ordered accumulator of ResultRows for a whole run."""

    def __init__(self, rows: Iterable[ResultRow] | None = None) -> None:
        self._rows: list[ResultRow] = list(rows) if rows is not None else []

    def append(self, row: ResultRow) -> None:
        self._rows.append(row)

    def extend(self, rows: Iterable[ResultRow]) -> None:
        self._rows.extend(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[ResultRow]:
        return iter(self._rows)

    @property
    def rows(self) -> tuple[ResultRow, ...]:
        return tuple(self._rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the table as a DataFrame with the published column names."""
        import pandas as pd

        return pd.DataFrame(
            [row.as_record() for row in self._rows], columns=RESULT_COLUMNS,
        )


@dataclass(frozen=True)
class FailureRecord:
    """A container, series or ROI that could not be processed."""

    path: str
    series: str | None
    error: str


@dataclass
class RunSummary:
    """Counts and failures collected over a whole run."""

    containers_found: int = 0
    series_processed: int = 0
    series_skipped: int = 0
    series_filtered: int = 0
    series_failed: int = 0
    containers_failed: int = 0
    rois_failed: int = 0
    failures: list[FailureRecord] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def has_failures(self) -> bool:
        return bool(self.containers_failed or self.series_failed or self.rois_failed)
