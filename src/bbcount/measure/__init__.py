"""bbcount Measure — spot detection and per-cell aggregation."""

from bbcount.measure.aggregator import AggregationResult, CellAggregator
from bbcount.measure.spots import PreparedImage, SpotDetector

__all__ = [
    "AggregationResult",
    "CellAggregator",
    "PreparedImage",
    "SpotDetector",
]
