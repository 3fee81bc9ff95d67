"""Pipeline orchestration: ingest, normalize, score in batches, filter, export."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from announcements.core.errors import EmptyDatasetError, PipelineError
from announcements.core.models import RecordStatus, RecordStore, ScoredRecord
from announcements.ingestion.loader import decode_bytes, load_file, parse_content
from announcements.processing.merger import BatchOutcome, ResultMerger
from announcements.processing.normalizer import normalize_records
from announcements.processing.scheduler import BatchScheduler, ScoringConfig
from announcements.processing.scorer import BatchScorer, LLMScorer
from announcements.reporting.sinks import write_csv, write_excel

logger = logging.getLogger(__name__)

EMPTY_DATASET_MESSAGE = "No valid records found in the input."


class PipelineStep(str, Enum):
    IDLE = "idle"
    CLEANING = "cleaning"
    SCORING = "scoring"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass
class PipelineState:
    """Single owned, mutable view of a run.

    Only the merger changes record statuses; everything else here is written
    by the pipeline's own control flow and may be read at any time.
    """

    step: PipelineStep = PipelineStep.IDLE
    batch_index: int = 0
    processed: int = 0
    total: int = 0
    error: Optional[str] = None
    store: RecordStore = field(default_factory=RecordStore)

    @property
    def records(self) -> List[ScoredRecord]:
        """Full, unfiltered collection in ingestion order."""

        return self.store.records

    @property
    def is_running(self) -> bool:
        return self.step in (PipelineStep.CLEANING, PipelineStep.SCORING)

    def reset(self) -> None:
        self.step = PipelineStep.IDLE
        self.batch_index = 0
        self.processed = 0
        self.total = 0
        self.error = None
        self.store.clear()


@dataclass(frozen=True)
class RecordFilter:
    """Case-insensitive substring filter over title, community and author."""

    title: str = ""
    community: str = ""
    author: str = ""

    def matches(self, record: ScoredRecord) -> bool:
        return (
            self.title.lower() in record.title.lower()
            and self.community.lower() in record.community.lower()
            and self.author.lower() in record.author.lower()
        )


def filter_records(records: Iterable[ScoredRecord], record_filter: Optional[RecordFilter] = None) -> List[ScoredRecord]:
    """Return the matching records, keeping their original order."""

    if record_filter is None:
        return list(records)
    return [record for record in records if record_filter.matches(record)]


class ScoringPipeline:
    """State machine ``idle -> cleaning -> scoring -> done`` around one run."""

    def __init__(
        self,
        scorer: Optional[BatchScorer] = None,
        config: Optional[ScoringConfig] = None,
        sleep: Optional[Callable[[float], None]] = None,
        on_progress: Optional[Callable[[PipelineState], None]] = None,
    ) -> None:
        self.scorer = scorer
        self.config = config or ScoringConfig()
        self.state = PipelineState()
        self._cancel_event = threading.Event()
        self._sleep = sleep
        self.on_progress = on_progress

    def cancel(self) -> None:
        """Stop issuing scoring requests; unsent records stay pending."""

        self._cancel_event.set()

    def run_bytes(self, raw: bytes) -> PipelineState:
        """Run on an upload's raw bytes."""

        return self._run(lambda: parse_content(decode_bytes(raw)))

    def run_file(self, path: Path) -> PipelineState:
        return self._run(lambda: load_file(path))

    def run(self, content: str) -> PipelineState:
        """Run on already-decoded text content."""

        return self._run(lambda: parse_content(content))

    def _run(self, ingest: Callable[[], list]) -> PipelineState:
        state = self.state
        state.reset()
        self._cancel_event.clear()
        state.step = PipelineStep.CLEANING
        self._notify()

        try:
            records = normalize_records(ingest())
            if not records:
                raise EmptyDatasetError(EMPTY_DATASET_MESSAGE)
            scorer = self.scorer or LLMScorer()
        except PipelineError as exc:
            logger.error("Run aborted: %s", exc)
            state.reset()
            state.error = str(exc)
            self._notify()
            raise

        for record in records:
            state.store.add(record)
        state.total = len(records)
        state.step = PipelineStep.SCORING
        self._notify()

        scheduler = BatchScheduler(
            scorer,
            ResultMerger(state.store),
            config=self.config,
            cancel_event=self._cancel_event,
            sleep=self._sleep,
            on_batch=self._on_batch,
        )
        completed = scheduler.run(records)
        state.step = PipelineStep.DONE if completed else PipelineStep.CANCELLED
        logger.info(
            "Run %s: %d scored, %d failed, %d pending",
            state.step.value,
            state.store.count(RecordStatus.SCORED),
            state.store.count(RecordStatus.FAILED),
            state.store.count(RecordStatus.PENDING),
        )
        self._notify()
        return state

    def _on_batch(self, index: int, processed: int, total: int, outcome: BatchOutcome) -> None:
        self.state.batch_index = index + 1
        self.state.processed = processed
        self._notify()

    def _notify(self) -> None:
        if self.on_progress:
            self.on_progress(self.state)


def default_output_name(output_path: Path) -> Path:
    """Append ``.csv`` when the chosen file name has no such suffix."""

    if output_path.suffix.lower() == ".csv":
        return output_path
    return output_path.with_name(f"{output_path.name}.csv")


def run_pipeline(
    input_path: Path,
    output_path: Path,
    sink: str = "csv",
    record_filter: Optional[RecordFilter] = None,
    config: Optional[ScoringConfig] = None,
    scorer: Optional[BatchScorer] = None,
    excel_path: Optional[Path] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Path:
    """Score a JSON file end to end and write the filtered CSV (and Excel)."""

    logger.info("Pipeline starting for %s", input_path)
    pipeline = ScoringPipeline(scorer=scorer, config=config or ScoringConfig.from_env(), sleep=sleep)
    state = pipeline.run_file(input_path)

    selected = filter_records(state.records, record_filter)
    logger.info("Exporting %d of %d records", len(selected), len(state.records))
    output_path = default_output_name(output_path)
    if not selected:
        logger.warning("No records match the filters; nothing to export")
    write_csv(selected, output_path)
    logger.info("Wrote CSV output to %s", output_path)

    if sink == "excel":
        excel_target = excel_path or output_path.with_suffix(".xlsx")
        write_excel(selected, excel_target)
        logger.info("Wrote Excel output to %s", excel_target)
    return output_path
