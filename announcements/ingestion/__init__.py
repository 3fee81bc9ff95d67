"""Reading and repairing uploaded announcement files."""
from announcements.ingestion.common import html_to_text
from announcements.ingestion.loader import decode_bytes, load_file, parse_content, repair_json

__all__ = [
    "decode_bytes",
    "html_to_text",
    "load_file",
    "parse_content",
    "repair_json",
]
