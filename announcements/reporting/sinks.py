"""Export destinations for scored announcement records."""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, List

from announcements.core.models import EXPORT_COLUMNS, ScoredRecord


def ensure_output_dir(output_path: Path) -> None:
    """Create parent folders for sink outputs when missing."""

    output_path.parent.mkdir(parents=True, exist_ok=True)


def format_value(value: Any) -> str:
    """Stringify one cell; ``None`` is empty and ``8.0`` renders as ``8``."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def record_to_row(record: ScoredRecord) -> List[str]:
    data = record.to_dict()
    return [format_value(data.get(column)) for column in EXPORT_COLUMNS]


def records_to_csv(records: Iterable[ScoredRecord]) -> str:
    """Serialize records as fully quoted CSV, newline-joined, no trailing newline."""

    records = list(records)
    if not records:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    writer.writerows(record_to_row(record) for record in records)
    return buffer.getvalue()[: -len("\n")]


def write_csv(records: Iterable[ScoredRecord], output_path: Path) -> None:
    """Write records to a CSV file; nothing is written for an empty selection."""

    content = records_to_csv(records)
    ensure_output_dir(output_path)
    if not content:
        return
    with output_path.open("w", newline="", encoding="utf-8") as csvfile:
        csvfile.write(content)


def write_excel(records: Iterable[ScoredRecord], output_path: Path) -> None:
    """Write records to an Excel workbook using openpyxl."""

    records = list(records)
    if not records:
        return

    try:
        from openpyxl import Workbook
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("openpyxl is required for Excel sinks") from exc

    ensure_output_dir(output_path)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "scored_announcements"
    sheet.append(EXPORT_COLUMNS)
    for record in records:
        data = record.to_dict()
        sheet.append([data.get(column) for column in EXPORT_COLUMNS])
    workbook.save(output_path)
