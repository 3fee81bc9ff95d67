"""Shared helpers for reading uploads and rendering markup as plain text."""
from __future__ import annotations

import html
import re
from pathlib import Path

_DROPPED_BLOCKS = re.compile(r"(?is)<(script|style)\b[^>]*>.*?</\1\s*>")
_COMMENTS = re.compile(r"(?s)<!--.*?-->")
# Block-level boundaries separate words; inline tags must not split them.
_BLOCK_TAGS = re.compile(r"(?i)</?(?:br|p|div|li|ul|ol|tr|td|th|h[1-6]|blockquote|section|article)\b[^>]*>")
# A "<" that does not open a tag (e.g. "nota < 5") is kept as text.
_ANY_TAG = re.compile(r"</?[A-Za-z!][^>]*>")
_WHITESPACE = re.compile(r"\s+")


def read_bytes(path: Path) -> bytes:
    """Read an uploaded file from disk.

    Keeping file IO in one place lets the dashboard feed in-memory uploads
    through the same parsing functions.
    """

    return path.read_bytes()


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs (``\\xa0`` included) to one space and trim."""

    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()


def html_to_text(raw: str) -> str:
    """Convert HTML content into a single line of normalized plain text.

    Block-level tags become a word boundary and ``script``/``style`` bodies
    are dropped, unlike a browser's ``textContent``: ``<p>a</p><p>b</p>``
    reads ``a b`` rather than ``ab``. Word counts of multi-paragraph
    descriptions are therefore higher than a ``textContent`` rendering gives.
    A ``<`` that does not open a tag stays in the text.
    """

    text = _DROPPED_BLOCKS.sub(" ", raw)
    text = _COMMENTS.sub("", text)
    text = _BLOCK_TAGS.sub(" ", text)
    text = _ANY_TAG.sub("", text)
    text = html.unescape(text)
    return collapse_whitespace(text)
