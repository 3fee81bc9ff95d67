"""Core building blocks for the announcements package."""
from announcements.core.logging import configure_logging
from announcements.core.models import (
    DIMENSIONS,
    EXPORT_COLUMNS,
    SCORE_WEIGHTS,
    RecordStatus,
    RecordStore,
    ScoredRecord,
    compute_quality_score,
)

__all__ = [
    "configure_logging",
    "DIMENSIONS",
    "EXPORT_COLUMNS",
    "SCORE_WEIGHTS",
    "RecordStatus",
    "RecordStore",
    "ScoredRecord",
    "compute_quality_score",
]
