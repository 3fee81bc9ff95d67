"""Export destinations for scored records."""
from announcements.reporting.sinks import ensure_output_dir, records_to_csv, write_csv, write_excel

__all__ = ["ensure_output_dir", "records_to_csv", "write_csv", "write_excel"]
