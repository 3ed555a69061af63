"""Shared fixtures for pipeline tests.

Containers are empty ``.lif`` files on disk so discovery runs for real;
``open_container`` is replaced with an in-memory reader serving synthetic
series.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from bbcount.core.exceptions import FormatError
from bbcount.io.models import ContainerFile
from bbcount.io.readers import ContainerReader


class InMemoryReader(ContainerReader):
    """ContainerReader over ``(raw_name, czyx_array)`` pairs.

    An exception in place of the pair list is raised by ``series_count``; an
    exception in place of an array is raised when that series is read.
    """

    def __init__(self, container: ContainerFile, series) -> None:  # type: ignore[no-untyped-def]
        super().__init__(container)
        self._series = series
        self.closed = False
        self.read_indices: list[int] = []

    def close(self) -> None:
        self.closed = True

    def series_count(self) -> int:
        if isinstance(self._series, Exception):
            raise self._series
        return len(self._series)

    def _raw_name(self, index: int) -> str:
        return self._series[index][0]

    def _read_czyx(self, index: int) -> tuple[np.ndarray, float | None]:
        self.read_indices.append(index)
        data = self._series[index][1]
        if isinstance(data, Exception):
            raise data
        return data, None


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    d = tmp_path / "input"
    d.mkdir()
    return d


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def containers(input_dir: Path, monkeypatch) -> Callable[..., dict[str, InMemoryReader]]:
    """Register in-memory containers by file name.

    A value of None makes opening that container fail with FormatError.
    Returns the readers created so far, by file name.
    """
    readers: dict[str, InMemoryReader] = {}
    contents: dict[str, list[tuple[str, np.ndarray]] | None] = {}

    def fake_open(container: ContainerFile) -> InMemoryReader:
        series = contents[container.path.name]
        if series is None:
            raise FormatError(str(container.path), "corrupt header")
        reader = InMemoryReader(container, series)
        readers[container.path.name] = reader
        return reader

    monkeypatch.setattr("bbcount.pipeline.engine.open_container", fake_open)

    def _register(name: str, series: list[tuple[str, np.ndarray]] | None):
        (input_dir / name).write_bytes(b"")
        contents[name] = series
        return readers

    return _register


@pytest.fixture
def two_cells() -> list[list[tuple[float, float]]]:
    """Outlines around the first block and around the other two."""
    return [
        [(4.0, 4.0), (13.0, 4.0), (13.0, 13.0), (4.0, 13.0)],
        [(15.0, 4.0), (25.0, 4.0), (25.0, 24.0), (15.0, 24.0)],
    ]
