"""Data models for the IO module."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from bbcount.core.exceptions import ShapeError


@dataclass(frozen=True)
class ContainerFile:
    """A discovered container file holding one or more series."""

    path: Path
    format: str  # "lif" or "tiff"

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class SeriesInfo:
    """Series metadata available without reading pixel data."""

    index: int
    raw_name: str
    name: str


@dataclass(frozen=True, eq=False)
class Series:
    """One multi-channel z-stack acquisition.

    ``data`` is always 4D in ``(C, Z, Y, X)`` order.
    """

    info: SeriesInfo
    container: ContainerFile
    data: np.ndarray
    pixel_size_um: float | None = None

    def __post_init__(self) -> None:
        """Validate the array layout at construction time."""
        if self.data.ndim != 4:
            raise ShapeError(
                f"Series data must be 4D (C, Z, Y, X), got {self.data.ndim}D "
                f"with shape {self.data.shape}"
            )

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def channel_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def slice_count(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape_yx(self) -> tuple[int, int]:
        return int(self.data.shape[2]), int(self.data.shape[3])


@dataclass(frozen=True, eq=False)
class Projection:
    """Maximum-intensity projection of a series, ``data`` in ``(C, Y, X)``."""

    series_name: str
    data: np.ndarray

    @property
    def channel_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def shape_yx(self) -> tuple[int, int]:
        return int(self.data.shape[1]), int(self.data.shape[2])

    def channel(self, number: int) -> np.ndarray:
        """Return the 2D plane for 1-indexed channel ``number``.

        Raises:
            ShapeError: If the projection has fewer channels.
        """
        if number < 1 or number > self.channel_count:
            raise ShapeError(
                f"Channel {number} requested but {self.series_name!r} has "
                f"{self.channel_count} channel(s)"
            )
        return self.data[number - 1]
