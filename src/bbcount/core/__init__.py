"""bbcount core — configuration, models and exceptions."""

from bbcount.core.config import AnalysisConfig, load_config, save_config
from bbcount.core.exceptions import (
    BBCountError,
    ConfigError,
    FormatError,
    GeometryError,
    InputPathError,
    OutputPathError,
    ShapeError,
)
from bbcount.core.models import (
    CellResult,
    FailureRecord,
    ResultRow,
    ResultTable,
    Roi,
    RunSummary,
    Spot,
)

__all__ = [
    "AnalysisConfig",
    "load_config",
    "save_config",
    "BBCountError",
    "ConfigError",
    "FormatError",
    "GeometryError",
    "InputPathError",
    "OutputPathError",
    "ShapeError",
    "CellResult",
    "FailureRecord",
    "ResultRow",
    "ResultTable",
    "Roi",
    "RunSummary",
    "Spot",
]
