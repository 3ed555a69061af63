"""Recently used input/output directories — never raises, degrades gracefully."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_MAX_RECENT = 10
_CONFIG_DIR = Path("~/.config/bbcount").expanduser()
_RECENT_FILE = _CONFIG_DIR / "recent.json"

KINDS = ("input", "output")


def load_recent(kind: str) -> list[str]:
    """Load recent directories of ``kind``, pruning any that no longer exist.

    Returns an empty list on any error (corrupted JSON, permissions, etc.).
    """
    data = _load_all()
    paths = data.get(kind, [])
    if not isinstance(paths, list):
        return []
    valid = [p for p in paths if isinstance(p, str) and Path(p).is_dir()]
    if len(valid) != len(paths):
        data[kind] = valid
        _save(data)
    return valid


def last_used(kind: str) -> str | None:
    """Most recently used directory of ``kind``, if any."""
    recent = load_recent(kind)
    return recent[0] if recent else None


def add_to_recent(kind: str, path: str | Path) -> None:
    """Move a directory to the front of the ``kind`` list."""
    if kind not in KINDS:
        raise ValueError(f"Unknown recent kind {kind!r}; expected one of {KINDS}")
    path_str = str(Path(path).resolve())
    data = _load_all()
    recent = [p for p in data.get(kind, []) if isinstance(p, str) and p != path_str]
    recent.insert(0, path_str)
    data[kind] = recent[:_MAX_RECENT]
    _save(data)


def _load_all() -> dict[str, list[str]]:
    try:
        if not _RECENT_FILE.exists():
            return {}
        data = json.loads(_RECENT_FILE.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load recent directories: %s", e)
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: v for k, v in data.items() if k in KINDS}


def _save(data: dict[str, list[str]]) -> None:
    """Atomically write the recent lists to disk."""
    try:
        _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        # Write to temp file then atomic rename
        fd, tmp = tempfile.mkstemp(dir=_CONFIG_DIR, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, _RECENT_FILE)
        except BaseException:
            # Clean up temp file on failure
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
    except OSError as e:
        logger.warning("Failed to write recent directories: %s", e)
