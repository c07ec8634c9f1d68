"""Aggregation, publishing and capture orchestration."""

from .aggregation import DeltaAggregator, attribute_deltas, extract_match_history
from .capture import CaptureResult, SnapshotCaptureJob
from .publisher import StatsPublisher

__all__ = [
    "CaptureResult",
    "DeltaAggregator",
    "SnapshotCaptureJob",
    "StatsPublisher",
    "attribute_deltas",
    "extract_match_history",
]
