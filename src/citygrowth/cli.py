"""CLI for the population growth report.

Reads the population table of a workbook, ranks cities by growth and writes
the top entries with a chart into a new worksheet.

Usage examples:
    python -m citygrowth.cli --input-file data/raw/population.xlsx

    python -m citygrowth.cli --input-file data/raw/population.xlsx \
        --output-file data/output/report.xlsx --top-n 5 --preview

    python -m citygrowth.cli --input-file data/raw/population.xlsx \
        --config report.yaml --latest-policy reject --dry-run

Settings come from the defaults, then the --config YAML file, then flags.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional

from .config.paths import PathManager
from .config.report_config import LatestValuePolicy, ReportConfig
from .data_handling.processors.pipeline import GrowthReportPipeline
from .workbook.errors import DataQualityError, SessionError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")
    # Suppress extremely verbose matplotlib font manager debug spam even when --verbose is used.
    for noisy in ["matplotlib", "matplotlib.font_manager", "PIL"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def show_notification(title: str, message: str) -> None:
    print(f"{title}: {message}", file=sys.stderr)


def report_failure(error: BaseException) -> None:
    """Show the error to the user and log structured debug info when present"""
    show_notification("Error", str(error))
    if isinstance(error, SessionError):
        logger.info("Debug info: " + json.dumps(error.debug_info, default=str))
    elif isinstance(error, DataQualityError):
        logger.info(
            "Debug info: " + json.dumps({"row": error.row_index, "value": error.value}, default=str)
        )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Rank cities by population growth and chart the top entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--input-file", required=True, help="Workbook (.xlsx) holding the population table")
    p.add_argument("--output-file", help="Where to save the report (default: update the input workbook)")
    p.add_argument(
        "--save-copy",
        action="store_true",
        help="Save to data/output/<name>_growth_report.xlsx instead of updating the input",
    )
    p.add_argument("--config", help="YAML file with report settings")
    # Overrides
    p.add_argument("--table", help="Name of the population table")
    p.add_argument("--sheet-name", help="Name of the output worksheet")
    p.add_argument("--top-n", type=int, help="Number of cities to keep")
    p.add_argument(
        "--latest-policy",
        choices=[policy.value for policy in LatestValuePolicy],
        help="Handling of non-numeric latest values: propagate as NaN or reject the run",
    )
    p.add_argument("--preview", action="store_true", help="Also save a PNG preview of the chart")
    p.add_argument("--dry-run", action="store_true", help="Rank and print only; do not modify any workbook")
    p.add_argument("--verbose", action="store_true")
    return p


def load_config(args: argparse.Namespace) -> ReportConfig:
    config = ReportConfig.from_yaml(args.config) if args.config else ReportConfig()
    return config.with_overrides(
        table_name=args.table,
        sheet_name=args.sheet_name,
        top_n=args.top_n,
        latest_policy=args.latest_policy,
        save_preview=True if args.preview else None,
    )


def _print_ranking(ranking) -> None:
    print(f"{'Rank':>4}  {'City':<30} {'Population Growth':>18}")
    for index, item in enumerate(ranking, start=1):
        growth = f"{item.growth:,.0f}" if item.has_growth else "n/a"
        print(f"{index:>4}  {str(item.name):<30} {growth:>18}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args)
        paths = PathManager()
        pipeline = GrowthReportPipeline(config=config, paths=paths)

        if args.dry_run:
            ranking = pipeline.dry_run(Path(args.input_file))
            _print_ranking(ranking)
            return 0

        output_path = args.output_file
        if output_path is None and args.save_copy:
            output_path = paths.get_output_workbook_path(args.input_file)
        result = pipeline.run(Path(args.input_file), output_path=output_path)
    except Exception as e:
        report_failure(e)
        return 1

    _print_ranking(result.ranking)
    print(f"Saved '{result.sheet_name}' to {result.output_path}")
    if result.preview_path:
        print(f"Saved chart preview to {result.preview_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
