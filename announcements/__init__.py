"""Clean, score and export institutional announcements."""
from announcements.core import (
    EXPORT_COLUMNS,
    RecordStatus,
    ScoredRecord,
    configure_logging,
)
from announcements.core.errors import (
    EmptyDatasetError,
    IngestSyntaxError,
    MarkupCleaningError,
    PipelineError,
    ScoringBatchError,
)
from announcements.ingestion import load_file, parse_content, repair_json
from announcements.processing.pipeline import (
    PipelineState,
    PipelineStep,
    RecordFilter,
    ScoringPipeline,
    filter_records,
    run_pipeline,
)
from announcements.reporting.sinks import records_to_csv, write_csv, write_excel

__all__ = [
    "EXPORT_COLUMNS",
    "EmptyDatasetError",
    "IngestSyntaxError",
    "MarkupCleaningError",
    "PipelineError",
    "PipelineState",
    "PipelineStep",
    "RecordFilter",
    "RecordStatus",
    "ScoredRecord",
    "ScoringBatchError",
    "ScoringPipeline",
    "configure_logging",
    "filter_records",
    "load_file",
    "parse_content",
    "records_to_csv",
    "repair_json",
    "run_pipeline",
    "write_csv",
    "write_excel",
]
