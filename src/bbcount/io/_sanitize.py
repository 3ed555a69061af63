"""Name sanitization helpers for IO module."""

from __future__ import annotations

import re

_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")
_REPEATED_UNDERSCORE_RE = re.compile(r"_{2,}")


def sanitize_name(value: str, fallback: str = "unnamed") -> str:
    """Sanitize a series name for use in output file names.

    Replaces whitespace and path separators with underscores, drops other
    path-unsafe characters, collapses repeated underscores and falls back if
    the result is empty.

    Args:
        value: Raw string to sanitize.
        fallback: Value to use if result is empty after cleaning.

    Returns:
        A name matching ``^[A-Za-z0-9][A-Za-z0-9._-]{0,199}$``.
    """
    result = value.strip()
    result = re.sub(r"[\s/\\:]+", "_", result)
    result = _INVALID_CHARS_RE.sub("", result)
    result = _REPEATED_UNDERSCORE_RE.sub("_", result)

    # Strip leading non-alphanumeric characters
    result = result.lstrip("._-")

    if not result:
        result = fallback

    # Leave room for output suffixes under the usual 255-byte name limit
    result = result[:200]

    return result


def series_display_name(container_stem: str, raw_name: str) -> str:
    """Build the unique, path-safe name of a series within a run."""
    return sanitize_name(f"{container_stem}_{raw_name}")
