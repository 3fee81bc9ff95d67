"""Ingestion should accept JSON arrays and recover common malformations."""
from pathlib import Path

import pytest

from announcements.core.errors import IngestSyntaxError
from announcements.ingestion.common import html_to_text
from announcements.ingestion.loader import decode_bytes, load_file, parse_content, repair_json


def test_parse_content_reads_valid_array():
    records = parse_content('[{"title": "A"}, {"title": "B"}]')

    assert [record["title"] for record in records] == ["A", "B"]


def test_parse_content_drops_non_objects():
    records = parse_content('[{"title": "A"}, null, 3, "x", [1], {"title": "B"}]')

    assert [record["title"] for record in records] == ["A", "B"]


def test_back_to_back_objects_are_joined_into_an_array():
    content = '{"title":"A"}{"title":"B"}'

    assert repair_json(content) == '[{"title":"A"},{"title":"B"}]'
    assert [record["title"] for record in parse_content(content)] == ["A", "B"]


def test_back_to_back_objects_with_whitespace_between():
    records = parse_content('{"title": "A"}\n\n  {"title": "B"}\n{"title": "C"}')

    assert len(records) == 3


def test_truncated_array_keeps_complete_objects():
    content = '[{"title": "A"}, {"title": "B"}, {"title": "C'

    records = parse_content(content)

    assert [record["title"] for record in records] == ["A", "B"]


def test_dangling_comma_before_closing_bracket_is_removed():
    records = parse_content('[{"title": "A"}, {"title": "B"},\n]')

    assert len(records) == 2


def test_trailing_garbage_after_array_is_cut():
    records = parse_content('[{"title": "A"}] trailing')

    assert records == [{"title": "A"}]


def test_unrepairable_content_raises_syntax_error():
    with pytest.raises(IngestSyntaxError, match="not valid JSON"):
        parse_content("this is not json")


def test_non_array_document_is_rejected():
    with pytest.raises(IngestSyntaxError, match="not an array"):
        parse_content('{"title": "only one"}')
    with pytest.raises(IngestSyntaxError, match="not an array"):
        parse_content('"just a string"')


def test_decode_bytes_tolerates_bom_and_rejects_binary():
    assert decode_bytes(b"\xef\xbb\xbf[]") == "[]"

    with pytest.raises(IngestSyntaxError):
        decode_bytes(b"\xff\xfe\xfa")


def test_load_file_reads_sample(sample_file: Path):
    records = load_file(sample_file)

    assert len(records) == 5
    assert records[0]["_id"]["$oid"] == "65a1f0c2e4b0a1b2c3d4e501"


def test_load_file_missing_path_raises(tmp_path: Path):
    with pytest.raises(IngestSyntaxError, match="Could not read"):
        load_file(tmp_path / "missing.json")


def test_html_to_text_strips_markup_and_entities():
    raw = "<p>Hello&nbsp;<b>wor</b>ld</p><p>Second&amp;line</p><script>alert(1)</script><!-- note -->"

    assert html_to_text(raw) == "Hello world Second&line"


def test_html_to_text_separates_block_elements():
    assert html_to_text("<ul><li>One</li><li>Two</li></ul>line<br>break") == "One Two line break"
