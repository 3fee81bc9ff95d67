"""Data models for announcement records moving through the scoring pipeline."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional

from announcements.core.errors import InvalidTransitionError

# Fixed weights of the aggregate quality score; they sum to 1.0.
SCORE_WEIGHTS: Dict[str, float] = {
    "clareza": 0.20,
    "empatia": 0.20,
    "coerencia": 0.20,
    "formalidade": 0.15,
    "eficacia": 0.15,
    "linguistica": 0.10,
}

DIMENSIONS: tuple[str, ...] = tuple(SCORE_WEIGHTS)
_CENTS = Decimal("0.01")

EXPORT_COLUMNS: List[str] = [
    "title",
    "community",
    "author",
    "text_clean",
    "word_count",
    *DIMENSIONS,
    "quality_score",
    "comentario",
    "status",
]


class RecordStatus(str, Enum):
    """Lifecycle of a record: Pending until the merger settles it."""

    PENDING = "Pending"
    SCORED = "Scored"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self is not RecordStatus.PENDING

    def __str__(self) -> str:
        return self.value


def compute_quality_score(scores: Mapping[str, float]) -> float:
    """Return the fixed-weight sum of the six dimensions, rounded to 2 places.

    Ties round up (``7.5 * 0.15 = 1.125`` gives ``1.13``); the built-in
    ``round`` would pick the even digit.
    """

    total = sum(float(scores[name]) * weight for name, weight in SCORE_WEIGHTS.items())
    return float(Decimal(total).quantize(_CENTS, rounding=ROUND_HALF_UP))


@dataclass
class ScoredRecord:
    """A normalized announcement plus the scores attached by the merger."""

    id: str
    title: str = ""
    community: str = ""
    author: str = ""
    text_clean: str = ""
    word_count: int = 0
    clareza: Optional[float] = None
    empatia: Optional[float] = None
    coerencia: Optional[float] = None
    formalidade: Optional[float] = None
    eficacia: Optional[float] = None
    linguistica: Optional[float] = None
    comentario: Optional[str] = None
    quality_score: Optional[float] = None
    status: RecordStatus = RecordStatus.PENDING

    def mark_scored(self, scores: Mapping[str, float], comentario: str) -> None:
        """Attach the dimension scores and move to ``Scored``."""

        self._ensure_pending(RecordStatus.SCORED)
        for name in DIMENSIONS:
            setattr(self, name, float(scores[name]))
        self.comentario = comentario
        self.quality_score = compute_quality_score(scores)
        self.status = RecordStatus.SCORED

    def mark_failed(self) -> None:
        """Move to ``Failed`` with a zero quality score and no dimensions."""

        self._ensure_pending(RecordStatus.FAILED)
        for name in DIMENSIONS:
            setattr(self, name, None)
        self.comentario = None
        self.quality_score = 0.0
        self.status = RecordStatus.FAILED

    def _ensure_pending(self, target: RecordStatus) -> None:
        if self.status.is_terminal:
            raise InvalidTransitionError(
                f"Record {self.id} is already {self.status.value}; cannot become {target.value}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dictionary representation for tabular output."""

        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class RecordStore:
    """Ordered, id-indexed collection shared by the scheduler, merger and readers.

    The collection only grows during normalization and is mutated per id by
    the merger afterwards; readers may iterate it at any time.
    """

    _records: List[ScoredRecord] = field(default_factory=list)
    _index: Dict[str, ScoredRecord] = field(default_factory=dict)

    def add(self, record: ScoredRecord) -> None:
        if record.id in self._index:
            raise ValueError(f"Duplicate record id {record.id}")
        self._records.append(record)
        self._index[record.id] = record

    def get(self, record_id: str) -> Optional[ScoredRecord]:
        return self._index.get(record_id)

    def clear(self) -> None:
        self._records.clear()
        self._index.clear()

    @property
    def records(self) -> List[ScoredRecord]:
        """Snapshot of every record in ingestion order."""

        return list(self._records)

    def count(self, status: RecordStatus) -> int:
        return sum(1 for record in self._records if record.status is status)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._index

    def __iter__(self) -> Iterator[ScoredRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
