"""Sequential, rate-limited batch scoring."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from announcements.core.errors import ConfigurationError, ScoringBatchError
from announcements.core.models import ScoredRecord
from announcements.core.utils import get_int_setting
from announcements.processing.merger import BatchOutcome, ResultMerger
from announcements.processing.scorer import BatchScorer

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY_MS = 5000
DEFAULT_MAX_TEXT_LENGTH = 2000


@dataclass(frozen=True)
class ScoringConfig:
    """Batching knobs; the delay is constant backpressure, not adaptive backoff."""

    batch_size: int = DEFAULT_BATCH_SIZE
    inter_batch_delay_ms: int = DEFAULT_DELAY_MS
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.inter_batch_delay_ms < 0:
            raise ConfigurationError(f"inter_batch_delay_ms must not be negative, got {self.inter_batch_delay_ms}")
        if self.max_text_length < 1:
            raise ConfigurationError(f"max_text_length must be at least 1, got {self.max_text_length}")

    @property
    def inter_batch_delay(self) -> float:
        """Delay in seconds."""
        return self.inter_batch_delay_ms / 1000

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Build a config from ``SCORING_*`` settings, falling back to defaults."""

        try:
            return cls(
                batch_size=get_int_setting("SCORING_BATCH_SIZE", DEFAULT_BATCH_SIZE),
                inter_batch_delay_ms=get_int_setting("SCORING_BATCH_DELAY_MS", DEFAULT_DELAY_MS),
                max_text_length=get_int_setting("SCORING_MAX_TEXT_LENGTH", DEFAULT_MAX_TEXT_LENGTH),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid scoring setting: {exc}") from exc


def build_batches(records: Sequence[ScoredRecord], size: int) -> List[List[ScoredRecord]]:
    """Split records into contiguous batches; the last one may be smaller."""

    return [list(records[start : start + size]) for start in range(0, len(records), size)]


def build_payload(batch: Sequence[ScoredRecord], max_text_length: int) -> List[Dict[str, str]]:
    """Minimal request body: id plus truncated text."""

    return [{"id": record.id, "text": record.text_clean[:max_text_length]} for record in batch]


class BatchScheduler:
    """Drives one scoring call per batch, strictly one at a time.

    ``on_batch`` is called after every merged batch with
    ``(batch_index, processed, total, outcome)``. ``cancel_event`` is checked
    before each request and interrupts the inter-batch wait.
    """

    def __init__(
        self,
        scorer: BatchScorer,
        merger: ResultMerger,
        config: Optional[ScoringConfig] = None,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
        on_batch: Optional[Callable[[int, int, int, BatchOutcome], None]] = None,
    ) -> None:
        self.scorer = scorer
        self.merger = merger
        self.config = config or ScoringConfig()
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep
        self.on_batch = on_batch
        self.processed = 0

    def run(self, records: Sequence[ScoredRecord]) -> bool:
        """Score every batch in order. Returns ``False`` when cancelled."""

        total = len(records)
        batches = build_batches(records, self.config.batch_size)
        self.processed = 0
        logger.info("Scoring %d records in %d batches of up to %d", total, len(batches), self.config.batch_size)

        for index, batch in enumerate(batches):
            if self.cancel_event.is_set():
                logger.warning("Scoring cancelled before batch %d of %d", index + 1, len(batches))
                return False

            outcome = self._score(batch)
            self.processed = min(self.processed + len(batch), total)
            logger.info(
                "Batch %d/%d: %d scored, %d failed (%d/%d processed)",
                index + 1,
                len(batches),
                outcome.scored,
                outcome.failed,
                self.processed,
                total,
            )
            if self.on_batch:
                self.on_batch(index, self.processed, total, outcome)

            if index + 1 < len(batches) and self._pause():
                logger.warning("Scoring cancelled after batch %d of %d", index + 1, len(batches))
                return False
        return True

    def _score(self, batch: Sequence[ScoredRecord]) -> BatchOutcome:
        ids = [record.id for record in batch]
        payload = build_payload(batch, self.config.max_text_length)
        try:
            response = self.scorer.score_batch(payload)
        except ScoringBatchError as exc:
            return self.merger.merge_batch(ids, error=exc)
        except Exception as exc:  # isolate any scorer failure to this batch
            logger.exception("Scorer raised unexpectedly for a batch of %d records", len(batch))
            return self.merger.merge_batch(ids, error=ScoringBatchError(str(exc)))
        return self.merger.merge_batch(ids, response=response)

    def _pause(self) -> bool:
        """Wait between batches; ``True`` when cancellation arrived."""

        delay = self.config.inter_batch_delay
        if self._sleep is not None:
            self._sleep(delay)
            return self.cancel_event.is_set()
        return self.cancel_event.wait(delay)
