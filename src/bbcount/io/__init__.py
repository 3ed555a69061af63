"""bbcount IO — container discovery, LIF/TIFF series readers, projections."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from bbcount.io.models import ContainerFile, Projection, Series, SeriesInfo
from bbcount.io.readers import (
    ContainerReader,
    LifReader,
    TiffReader,
    open_container,
    to_czyx,
)
from bbcount.io.scanner import ContainerScanner
from bbcount.io.transforms import project_mip, project_series

__all__ = [
    "ContainerFile",
    "ContainerReader",
    "ContainerScanner",
    "LifReader",
    "Projection",
    "Series",
    "SeriesInfo",
    "TiffReader",
    "discover",
    "open_container",
    "project_mip",
    "project_series",
    "to_czyx",
]


def discover(root: Path, extensions: Iterable[str] = (".lif",)) -> list[ContainerFile]:
    """Find container files under a directory. Convenience wrapper.

    Args:
        root: Directory to scan recursively.
        extensions: Container extensions to collect.

    Returns:
        Discovered container files.
    """
    return ContainerScanner(extensions).discover(root)
