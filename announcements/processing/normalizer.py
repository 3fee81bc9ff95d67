"""Normalize raw announcement dictionaries into pending scored records."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Iterable, List, Mapping, Optional, Set

from announcements.core.errors import MarkupCleaningError
from announcements.core.models import ScoredRecord
from announcements.ingestion.common import html_to_text

logger = logging.getLogger(__name__)


def _text_field(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _nested(raw: Mapping[str, Any], outer: str, inner: str) -> Any:
    container = raw.get(outer)
    if isinstance(container, Mapping):
        return container.get(inner)
    return None


def clean_description(value: Any) -> str:
    """Render a description as plain text, raising for unusable markup."""

    if value is None:
        return ""
    if not isinstance(value, str):
        raise MarkupCleaningError(f"description must be a string, got {type(value).__name__}")
    return html_to_text(value)


def count_words(text: str) -> int:
    """Number of non-empty whitespace-delimited tokens."""

    return len(text.split())


def synthesize_id(seen_ids: Set[str]) -> str:
    """Create a timestamp+random id that does not collide with ``seen_ids``."""

    while True:
        candidate = f"{time.time_ns()}-{uuid.uuid4().hex}"
        if candidate not in seen_ids:
            return candidate


def _resolve_id(raw: Mapping[str, Any], seen_ids: Set[str]) -> str:
    embedded = _nested(raw, "_id", "$oid")
    if isinstance(embedded, str) and embedded:
        if embedded not in seen_ids:
            return embedded
        logger.warning("Duplicate record id %s; assigning a generated id", embedded)
    return synthesize_id(seen_ids)


def normalize_record(raw: Mapping[str, Any], seen_ids: Optional[Set[str]] = None) -> ScoredRecord:
    """Build a pending record from one raw dictionary.

    ``seen_ids`` is updated in place so ids stay unique across a run.
    """

    seen_ids = seen_ids if seen_ids is not None else set()
    record_id = _resolve_id(raw, seen_ids)
    seen_ids.add(record_id)

    try:
        text_clean = clean_description(raw.get("description"))
    except MarkupCleaningError as exc:
        logger.warning("Could not clean description of record %s: %s", record_id, exc)
        text_clean = ""

    return ScoredRecord(
        id=record_id,
        title=_text_field(raw.get("title")),
        community=_text_field(raw.get("community")),
        author=_text_field(_nested(raw, "author", "name")),
        text_clean=text_clean,
        word_count=count_words(text_clean),
    )


def normalize_records(raw_records: Iterable[Mapping[str, Any]]) -> List[ScoredRecord]:
    """Normalize records in input order; the order is kept for display and export."""

    seen_ids: Set[str] = set()
    normalized = [normalize_record(raw, seen_ids) for raw in raw_records]
    logger.info("Normalized %d records", len(normalized))
    return normalized
