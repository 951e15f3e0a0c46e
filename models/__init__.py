"""
Core data models for Spyglass.
"""

from .schemas import (
    AnalysisMode,
    Section,
    TrafficRecord,
    TRAFFIC_SOURCE_LABELS,
    HistoryItem,
    VideoOperation,
)
from .exceptions import (
    SpyglassError,
    ValidationError,
    ExternalServiceError,
    MediaDecodeError,
    PersistenceError,
)

__all__ = [
    "AnalysisMode",
    "Section",
    "TrafficRecord",
    "TRAFFIC_SOURCE_LABELS",
    "HistoryItem",
    "VideoOperation",
    "SpyglassError",
    "ValidationError",
    "ExternalServiceError",
    "MediaDecodeError",
    "PersistenceError",
]
