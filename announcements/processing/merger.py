"""Reconcile scoring responses with pending records by id."""
from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from announcements.core.errors import ScoringBatchError
from announcements.core.models import DIMENSIONS, RecordStore

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

SCORE_MIN = 0.0
SCORE_MAX = 10.0


@dataclass
class BatchOutcome:
    """Summary of one merged batch."""

    scored: int = 0
    failed: int = 0
    error: Optional[str] = None


def _decode(response: Any) -> Any:
    if isinstance(response, (bytes, bytearray)):
        response = response.decode("utf-8", errors="replace")
    if not isinstance(response, str):
        return response

    text = response.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScoringBatchError(f"response is not valid JSON: {exc}") from exc


def _score_value(item: Dict[str, Any], name: str) -> float:
    value = item.get(name)
    # bool is an int subclass; true/false are not scores.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringBatchError(f"item {item.get('id')!r} has no numeric '{name}'")
    value = float(value)
    if math.isnan(value) or not SCORE_MIN <= value <= SCORE_MAX:
        raise ScoringBatchError(f"item {item.get('id')!r} has '{name}' outside [0, 10]: {value}")
    return value


def parse_response(response: Any, requested_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
    """Validate a scoring response and index it by id.

    The batch is all-or-nothing: an unknown or repeated id, a missing field or
    an out-of-range score invalidates the whole response. Requested ids that
    simply have no item are allowed; the merger fails those records alone.
    """

    data = _decode(response)
    if not isinstance(data, list):
        raise ScoringBatchError("response is not a JSON array")

    requested = set(requested_ids)
    results: Dict[str, Dict[str, Any]] = {}
    for item in data:
        if not isinstance(item, dict):
            raise ScoringBatchError("response contains a non-object item")
        item_id = item.get("id")
        if not isinstance(item_id, str) or item_id not in requested:
            raise ScoringBatchError(f"response item has unknown id {item_id!r}")
        if item_id in results:
            raise ScoringBatchError(f"response repeats id {item_id!r}")
        comentario = item.get("comentario")
        if not isinstance(comentario, str):
            raise ScoringBatchError(f"item {item_id!r} has no 'comentario'")

        scores = {name: _score_value(item, name) for name in DIMENSIONS}
        results[item_id] = {"scores": scores, "comentario": comentario}
    return results


class ResultMerger:
    """Sole writer of terminal statuses in the shared record store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def merge_batch(
        self,
        requested_ids: Sequence[str],
        response: Any = None,
        error: Optional[BaseException] = None,
    ) -> BatchOutcome:
        """Apply one batch's response (or failure) to its records."""

        if error is None:
            try:
                results = parse_response(response, requested_ids)
            except ScoringBatchError as exc:
                error = exc

        if error is not None:
            logger.warning("Batch of %d records failed: %s", len(requested_ids), error)
            self._fail_all(requested_ids)
            return BatchOutcome(failed=len(requested_ids), error=str(error))

        outcome = BatchOutcome()
        for record_id in requested_ids:
            record = self._lookup(record_id)
            result = results.get(record_id)
            if result is None:
                logger.warning("No score returned for record %s", record_id)
                record.mark_failed()
                outcome.failed += 1
                continue
            record.mark_scored(result["scores"], result["comentario"])
            outcome.scored += 1
        return outcome

    def _fail_all(self, requested_ids: Sequence[str]) -> None:
        for record_id in requested_ids:
            self._lookup(record_id).mark_failed()

    def _lookup(self, record_id: str):
        record = self.store.get(record_id)
        if record is None:
            raise KeyError(f"Unknown record id {record_id}")
        return record
