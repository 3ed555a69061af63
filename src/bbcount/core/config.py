"""AnalysisConfig and its YAML serialization.

Requires pyyaml for file round-trips. Raises ImportError with clear install
instructions if pyyaml is not available.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from bbcount.core.exceptions import ConfigError

SUPPORTED_THRESHOLD_METHODS = frozenset({"otsu", "triangle", "li"})
SUPPORTED_EXTENSIONS = frozenset({".lif", ".tif", ".tiff"})

_MAX_PATTERN_LENGTH = 200


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for a basal body counting run.

    Attributes:
        maxima_tolerance: Minimum prominence of a maximum, in filtered
            intensity units.
        top_hat_radius: Disk radius of the white top-hat filter (0 disables).
        median_radius: Disk radius of the median filter (0 disables).
        choose_lng: When true, only series whose name matches
            ``series_pattern`` are processed.
        series_pattern: Case-insensitive regex used by ``choose_lng``.
        quant_channel: 1-indexed channel on which spots are counted.
        display_channel: 1-indexed channel shown to the operator.
        threshold_method: Global threshold used to define the foreground.
        extensions: Container file extensions to discover.
        checkpoint_results: Rewrite ``Full_Results.csv`` after every series.
    """

    maxima_tolerance: float = 50.0
    top_hat_radius: int = 5
    median_radius: int = 1
    choose_lng: bool = False
    series_pattern: str = "lng"
    quant_channel: int = 2
    display_channel: int = 2
    threshold_method: str = "otsu"
    extensions: tuple[str, ...] = field(default_factory=lambda: (".lif",))
    checkpoint_results: bool = True

    def __post_init__(self) -> None:
        """Validate and normalize values at construction time."""
        if self.maxima_tolerance < 0:
            raise ConfigError(
                f"maxima_tolerance must be >= 0, got {self.maxima_tolerance}"
            )
        for name in ("top_hat_radius", "median_radius"):
            value = getattr(self, name)
            if int(value) != value or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value}")
        for name in ("quant_channel", "display_channel"):
            value = getattr(self, name)
            if int(value) != value or value < 1:
                raise ConfigError(f"{name} is 1-indexed and must be >= 1, got {value}")
        if self.threshold_method not in SUPPORTED_THRESHOLD_METHODS:
            raise ConfigError(
                f"Unknown threshold method {self.threshold_method!r}. "
                f"Supported: {sorted(SUPPORTED_THRESHOLD_METHODS)}"
            )
        if len(self.series_pattern) > _MAX_PATTERN_LENGTH:
            raise ConfigError(
                f"series_pattern exceeds max length {_MAX_PATTERN_LENGTH}"
            )
        try:
            re.compile(self.series_pattern)
        except re.error as e:
            raise ConfigError(f"Invalid regex for 'series_pattern': {e}") from e

        extensions = tuple(_normalize_extension(ext) for ext in self.extensions)
        if not extensions:
            raise ConfigError("extensions must not be empty")
        unknown = [ext for ext in extensions if ext not in SUPPORTED_EXTENSIONS]
        if unknown:
            raise ConfigError(
                f"Unsupported extensions {unknown}. "
                f"Supported: {sorted(SUPPORTED_EXTENSIONS)}"
            )
        object.__setattr__(self, "extensions", extensions)

    def matches_series(self, raw_name: str) -> bool:
        """Return True if a series with this name should be processed."""
        if not self.choose_lng:
            return True
        return re.search(self.series_pattern, raw_name, re.IGNORECASE) is not None

    def with_overrides(self, **overrides: Any) -> AnalysisConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["extensions"] = list(self.extensions)
        return data


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _require_yaml() -> Any:
    """Import and return the yaml module, or raise a helpful error."""
    try:
        import yaml

        return yaml
    except ImportError:
        raise ImportError(
            "pyyaml is required for configuration files. "
            "Install it with: pip install pyyaml"
        ) from None


def save_config(config: AnalysisConfig, path: Path) -> None:
    """Serialize an AnalysisConfig to a YAML file.

    Args:
        config: The configuration to serialize.
        path: File path to write.
    """
    yaml = _require_yaml()

    with open(path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_config(path: Path) -> AnalysisConfig:
    """Deserialize an AnalysisConfig from a YAML file.

    Keys missing from the file keep their defaults.

    Args:
        path: Path to the YAML file.

    Returns:
        The AnalysisConfig described by the file.

    Raises:
        ConfigError: If the file is missing, not a mapping, has unknown keys
            or invalid values.
    """
    yaml = _require_yaml()

    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid config YAML: expected a mapping, got {type(data).__name__}"
        )

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    if "extensions" in data:
        extensions = data["extensions"]
        if isinstance(extensions, str):
            extensions = [extensions]
        data["extensions"] = tuple(extensions)

    try:
        return AnalysisConfig(**data)
    except TypeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
