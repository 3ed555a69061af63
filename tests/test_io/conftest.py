"""Shared fixtures for IO module tests."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import pytest


@pytest.fixture
def container_tree(tmp_path: Path) -> Path:
    """Directory tree with containers at several depths.

    Layout::

        root/a.lif
        root/notes.txt
        root/sub/b.LIF
        root/sub/deeper/c.tif
    """
    root = tmp_path / "root"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "a.lif").write_bytes(b"")
    (root / "notes.txt").write_text("not an image")
    (root / "sub" / "b.LIF").write_bytes(b"")
    (root / "sub" / "deeper" / "c.tif").write_bytes(b"")
    return root


def _frame(c: int, z: int) -> np.ndarray:
    return np.full((8, 8), c * 10 + z, dtype=np.uint8)


@pytest.fixture
def fake_lif() -> MagicMock:
    """Stand-in for readlif's LifFile: 2 series of 2 channels x 3 slices."""
    image = MagicMock()
    image.channels = 2
    image.dims = SimpleNamespace(x=8, y=8, z=3, t=1, m=1)
    image.scale = (4.0, 4.0, 1.0, None)
    image.get_frame.side_effect = lambda z=0, t=0, c=0, m=0: _frame(c, z)

    lif = MagicMock()
    lif.num_images = 2
    lif.image_list = [{"name": "lng_cell1"}, {"name": "Nucleus 01"}]
    lif.get_image.return_value = image
    return lif
