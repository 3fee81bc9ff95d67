"""Turn uploaded JSON content into raw announcement dictionaries."""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List

from announcements.core.errors import IngestSyntaxError
from announcements.ingestion.common import read_bytes

logger = logging.getLogger(__name__)

_OBJECT_BOUNDARY = re.compile(r"}\s*{")
_DANGLING_COMMA = re.compile(r",\s*]$")

SYNTAX_ERROR_MESSAGE = "Syntax error: the file is not valid JSON."
NOT_AN_ARRAY_MESSAGE = "The JSON document is not an array. The file must contain an array of objects."


def repair_json(content: str) -> str:
    """Best-effort repair of common malformations.

    Back-to-back objects (``{..}{..}``) are joined into an array; an array
    with a truncated tail is cut back to its last complete element. The
    result is not guaranteed to be lossless: a broken trailing fragment is
    discarded rather than reported.
    """

    fixed = content.strip()
    if fixed.startswith("{"):
        fixed = "[" + _OBJECT_BOUNDARY.sub("},{", fixed) + "]"
    elif fixed.startswith("["):
        last_brace = fixed.rfind("}")
        last_bracket = fixed.rfind("]")
        if last_brace > last_bracket:
            fixed = fixed[: last_brace + 1] + "]"
        elif last_bracket > -1:
            fixed = fixed[: last_bracket + 1]
    return _DANGLING_COMMA.sub("]", fixed)


def _loads_with_repair(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as initial_error:
        logger.warning("Direct JSON parsing failed (%s); attempting repair", initial_error)

    try:
        return json.loads(repair_json(content))
    except json.JSONDecodeError as repair_error:
        logger.error("JSON repair failed: %s", repair_error)
        raise IngestSyntaxError(SYNTAX_ERROR_MESSAGE) from repair_error


def parse_content(content: str) -> List[Dict[str, Any]]:
    """Parse text into a list of raw records, dropping non-object elements."""

    data = _loads_with_repair(content)
    if not isinstance(data, list):
        raise IngestSyntaxError(NOT_AN_ARRAY_MESSAGE)

    records = [item for item in data if isinstance(item, dict)]
    dropped = len(data) - len(records)
    if dropped:
        logger.debug("Dropped %d array elements that are not objects", dropped)
    logger.info("Parsed %d raw records", len(records))
    return records


def decode_bytes(raw: bytes) -> str:
    """Decode uploaded bytes as UTF-8, tolerating a byte-order mark."""

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestSyntaxError(f"{SYNTAX_ERROR_MESSAGE} ({exc.reason})") from exc


def load_file(path: Path) -> List[Dict[str, Any]]:
    """Read and parse a JSON upload from disk."""

    logger.info("Loading records from %s", path)
    try:
        raw = read_bytes(path)
    except OSError as exc:
        raise IngestSyntaxError(f"Could not read the file {path}: {exc.strerror or exc}") from exc
    return parse_content(decode_bytes(raw))
