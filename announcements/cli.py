"""Command line entry point to clean, score and export an announcements file."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from announcements.core.errors import PipelineError
from announcements.core.logging import configure_logging
from announcements.processing.pipeline import RecordFilter, run_pipeline
from announcements.processing.scheduler import ScoringConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI entry point."""

    parser = argparse.ArgumentParser(description="Clean, score and export announcement records")
    parser.add_argument("--input", type=Path, required=True, help="JSON file with the announcements")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("output/comunicados_avaliados.csv"),
        help="CSV file to write the scored records to",
    )
    parser.add_argument(
        "--sink",
        choices=["csv", "excel"],
        default="csv",
        help="Also write an Excel workbook when set to 'excel'",
    )
    parser.add_argument("--excel-output", type=Path, help="Excel file to write when --sink=excel")
    parser.add_argument("--title", default="", help="Only export records whose title contains this text")
    parser.add_argument("--community", default="", help="Only export records whose community contains this text")
    parser.add_argument("--author", default="", help="Only export records whose author contains this text")
    parser.add_argument("--batch-size", type=int, help="Records per scoring request (default 10)")
    parser.add_argument("--delay-ms", type=int, help="Pause between scoring requests in milliseconds (default 5000)")
    return parser


def _resolve_config(args: argparse.Namespace) -> ScoringConfig:
    base = ScoringConfig.from_env()
    return ScoringConfig(
        batch_size=args.batch_size if args.batch_size is not None else base.batch_size,
        inter_batch_delay_ms=args.delay_ms if args.delay_ms is not None else base.inter_batch_delay_ms,
        max_text_length=base.max_text_length,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entrypoint for running the pipeline from the command line."""

    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        output_path = run_pipeline(
            args.input,
            args.output,
            sink=args.sink,
            record_filter=RecordFilter(title=args.title, community=args.community, author=args.author),
            config=_resolve_config(args),
            excel_path=args.excel_output,
        )
    except PipelineError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
