"""ContainerScanner — recursive discovery of microscopy container files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from bbcount.core.exceptions import InputPathError
from bbcount.io.models import ContainerFile

logger = logging.getLogger(__name__)

_FORMAT_BY_EXTENSION = {
    ".lif": "lif",
    ".tif": "tiff",
    ".tiff": "tiff",
}


class ContainerScanner:
    """Walks a directory tree for container files.

    Args:
        extensions: File extensions to collect, matched case-insensitively.
    """

    def __init__(self, extensions: Iterable[str] = (".lif",)) -> None:
        self._extensions = frozenset(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in extensions
        )
        unknown = self._extensions - set(_FORMAT_BY_EXTENSION)
        if unknown:
            raise ValueError(f"Unsupported container extensions: {sorted(unknown)}")

    def discover(self, root: Path) -> list[ContainerFile]:
        """Collect container files below ``root``.

        Subdirectories are visited depth-first with entries sorted by name.
        Symlinks are skipped to prevent directory escape and circular loops.
        Unreadable subdirectories are logged and skipped.

        Args:
            root: Directory to scan.

        Returns:
            Every matching file exactly once.

        Raises:
            InputPathError: If root does not exist, is not a directory or
                cannot be listed.
        """
        root = Path(root)
        if not root.exists():
            raise InputPathError(str(root), "does not exist")
        if not root.is_dir():
            raise InputPathError(str(root), "not a directory")
        if not os.access(root, os.R_OK | os.X_OK):
            raise InputPathError(str(root), "permission denied")

        found: list[ContainerFile] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames if not (current / d).is_symlink()
            )
            for filename in sorted(filenames):
                path = current / filename
                if path.is_symlink():
                    continue
                fmt = self._format_of(path)
                if fmt is not None:
                    found.append(ContainerFile(path=path, format=fmt))

        logger.info("Discovered %d container file(s) under %s", len(found), root)
        return found

    def _format_of(self, path: Path) -> str | None:
        suffix = path.suffix.lower()
        if suffix in self._extensions:
            return _FORMAT_BY_EXTENSION[suffix]
        return None

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning("Skipping unreadable directory %s: %s", error.filename, error.strerror)
