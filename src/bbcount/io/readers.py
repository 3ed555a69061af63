"""Container readers: Leica LIF via readlif, (OME-)TIFF via tifffile.

Every reader yields series as 4D ``(C, Z, Y, X)`` arrays so downstream code
never deals with format-specific axis orders.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import numpy as np

from bbcount.core.exceptions import FormatError, ShapeError
from bbcount.io._sanitize import series_display_name
from bbcount.io.models import ContainerFile, Series, SeriesInfo

logger = logging.getLogger(__name__)

_TARGET_AXES = "CZYX"


class ContainerReader(ABC):
    """Abstract reader over the series of one container file.

    Readers are context managers; ``close()`` releases the file handle.
    """

    def __init__(self, container: ContainerFile) -> None:
        self.container = container

    def __enter__(self) -> ContainerReader:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Release file handles. Default is a no-op."""

    @abstractmethod
    def series_count(self) -> int:
        """Number of series in the container."""

    @abstractmethod
    def _raw_name(self, index: int) -> str:
        """Series name as stored in the container metadata."""

    @abstractmethod
    def _read_czyx(self, index: int) -> tuple[np.ndarray, float | None]:
        """Read one series as ``(C, Z, Y, X)`` plus pixel size in µm."""

    def series_info(self, index: int) -> SeriesInfo:
        """Return metadata for series ``index`` without reading pixels."""
        self._check_index(index)
        raw = self._raw_name(index) or f"Series{index + 1:03d}"
        return SeriesInfo(
            index=index,
            raw_name=raw,
            name=series_display_name(self.container.stem, raw),
        )

    def series_name(self, index: int) -> str:
        """Sanitized, run-unique name of series ``index``."""
        return self.series_info(index).name

    def read_series(self, index: int) -> Series:
        """Read series ``index`` into memory.

        Raises:
            IndexError: If index is out of range.
            ShapeError: If the series cannot be laid out as (C, Z, Y, X).
            FormatError: If the pixel data cannot be decoded.
        """
        info = self.series_info(index)
        data, pixel_size = self._read_czyx(index)
        logger.debug(
            "Read series %d (%s) from %s with shape %s",
            index, info.name, self.container.path, data.shape,
        )
        return Series(info=info, container=self.container, data=data, pixel_size_um=pixel_size)

    def _check_index(self, index: int) -> None:
        count = self.series_count()
        if index < 0 or index >= count:
            raise IndexError(f"Series index {index} out of range (0-{count - 1})")


class LifReader(ContainerReader):
    """Leica LIF reader backed by readlif."""

    def __init__(self, container: ContainerFile) -> None:
        super().__init__(container)
        from readlif.reader import LifFile

        try:
            self._lif = LifFile(str(container.path))
        except Exception as exc:
            raise FormatError(str(container.path), str(exc)) from exc

    def series_count(self) -> int:
        return int(self._lif.num_images)

    def _raw_name(self, index: int) -> str:
        return str(self._lif.image_list[index].get("name", ""))

    def _read_czyx(self, index: int) -> tuple[np.ndarray, float | None]:
        try:
            image = self._lif.get_image(index)
            n_channels = int(image.channels)
            n_slices = max(int(image.dims.z), 1)
            planes = [
                [np.asarray(image.get_frame(z=z, t=0, c=c)) for z in range(n_slices)]
                for c in range(n_channels)
            ]
        except Exception as exc:
            raise FormatError(
                str(self.container.path), f"series {index}: {exc}",
            ) from exc

        shapes = {plane.shape for channel in planes for plane in channel}
        if len(shapes) != 1:
            raise ShapeError(
                f"Series {index} in {self.container.path.name} has planes of "
                f"differing shapes: {sorted(shapes)}"
            )
        data = np.stack([np.stack(channel) for channel in planes])
        return data, _lif_pixel_size(image.scale)


def _lif_pixel_size(scale: Any) -> float | None:
    """readlif reports scale as pixels per µm; invert the X entry."""
    try:
        px_per_um = float(scale[0])
    except (TypeError, IndexError, ValueError):
        return None
    if px_per_um > 0:
        return 1.0 / px_per_um
    return None


class TiffReader(ContainerReader):
    """TIFF / OME-TIFF reader backed by tifffile."""

    def __init__(self, container: ContainerFile) -> None:
        super().__init__(container)
        import tifffile

        try:
            self._tif = tifffile.TiffFile(str(container.path))
        except Exception as exc:
            raise FormatError(str(container.path), str(exc)) from exc

    def close(self) -> None:
        self._tif.close()

    def series_count(self) -> int:
        return len(self._tif.series)

    def _raw_name(self, index: int) -> str:
        series = self._tif.series[index]
        if self._tif.is_ome and series.name:
            return str(series.name)
        return f"Series{index + 1:03d}"

    def _read_czyx(self, index: int) -> tuple[np.ndarray, float | None]:
        series = self._tif.series[index]
        try:
            data = series.asarray()
        except Exception as exc:
            raise FormatError(
                str(self.container.path), f"series {index}: {exc}",
            ) from exc
        return to_czyx(data, series.axes), self._pixel_size()

    def _pixel_size(self) -> float | None:
        from bbcount.io.tiff import extract_pixel_size

        return extract_pixel_size(self._tif)


def to_czyx(data: np.ndarray, axes: str) -> np.ndarray:
    """Rearrange an array with labelled axes into ``(C, Z, Y, X)``.

    ``T`` (and any other positional axis besides the handled ones) is
    reduced to its first index. ``S`` samples act as channels when no
    ``C`` axis is present. A single unnamed ``Q``/``I`` axis becomes Z.

    Raises:
        ShapeError: If the axes cannot be mapped onto (C, Z, Y, X).
    """
    axes = axes.upper()
    if len(axes) != data.ndim:
        raise ShapeError(
            f"Axes {axes!r} do not match array with {data.ndim} dimensions"
        )
    if "Y" not in axes or "X" not in axes:
        raise ShapeError(f"Axes {axes!r} lack Y and X")

    mapped = list(axes)
    if "C" not in axes and "S" in axes:
        mapped[axes.index("S")] = "C"
    if "Z" not in mapped:
        for i, ax in enumerate(mapped):
            if ax in ("Q", "I"):
                mapped[i] = "Z"
                break

    index: list[Any] = []
    kept: list[str] = []
    for ax, size in zip(mapped, data.shape):
        if ax in _TARGET_AXES and ax not in kept:
            index.append(slice(None))
            kept.append(ax)
        elif size == 1 or ax in ("T", "M", "R", "H", "A", "P"):
            index.append(0)
        else:
            raise ShapeError(f"Cannot map axis {ax!r} of size {size} in {axes!r}")
    data = data[tuple(index)]

    for ax in _TARGET_AXES:
        if ax not in kept:
            data = data[np.newaxis]
            kept.insert(0, ax)
    order = [kept.index(ax) for ax in _TARGET_AXES]
    return np.transpose(data, order)


_READERS: dict[str, type[ContainerReader]] = {
    "lif": LifReader,
    "tiff": TiffReader,
}


def open_container(container: ContainerFile | Path) -> ContainerReader:
    """Open a container with the reader matching its format.

    Args:
        container: A discovered ContainerFile, or a path whose extension
            selects the format.

    Raises:
        FormatError: If the format is unsupported or the file cannot be opened.
    """
    if not isinstance(container, ContainerFile):
        path = Path(container)
        suffix = path.suffix.lower()
        fmt = {".lif": "lif", ".tif": "tiff", ".tiff": "tiff"}.get(suffix)
        if fmt is None:
            raise FormatError(str(path), f"unsupported extension {suffix!r}")
        container = ContainerFile(path=path, format=fmt)

    reader_cls = _READERS.get(container.format)
    if reader_cls is None:
        raise FormatError(str(container.path), f"unsupported format {container.format!r}")
    return reader_cls(container)
