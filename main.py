"""
Main Entry Point
=================
Cleans a CSV file with a set of declarative rules and reports
before/after data quality statistics.

Usage:
    python main.py --input data/customers.csv --remove-duplicates --trim-whitespace
    python main.py --input data/customers.csv --handle-missing fill
    python main.py --input data/customers.csv --rules-json rules.json --json
    python main.py --history                          # List recent cleaning jobs
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from tabclean.config import (
    HISTORY_LIMIT,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    LOG_LEVEL,
    MISSING_STRATEGIES,
    OUTPUT_DIR,
)
from tabclean.job_history import JobHistory
from tabclean.parser import MalformedInputError
from tabclean.pipeline import CleaningPipeline, PipelineError
from tabclean.rules import CleaningRules, InvalidRuleError


def configure_logging() -> None:
    """Configure structured logging for the cleaner."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Tabular CSV cleaner and data quality profiler",
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Path to the CSV file to clean",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_DIR),
        help=f"Directory for the cleaned file and report (default: {OUTPUT_DIR})",
    )
    parser.add_argument(
        "--remove-duplicates",
        action="store_true",
        help="Keep only the first occurrence of each identical row",
    )
    parser.add_argument(
        "--remove-empty-rows",
        action="store_true",
        help="Drop rows where every value is empty or whitespace",
    )
    parser.add_argument(
        "--trim-whitespace",
        action="store_true",
        help="Strip leading/trailing whitespace from every value",
    )
    parser.add_argument(
        "--handle-missing",
        choices=MISSING_STRATEGIES,
        default=None,
        help="What to do with missing values (default: keep)",
    )
    parser.add_argument(
        "--rules-json",
        type=str,
        help="JSON file holding a rules payload, e.g. {\"removeDuplicates\": true}",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the job result as JSON",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="List recent cleaning jobs and exit",
    )
    return parser.parse_args(argv)


def build_rules(args: argparse.Namespace) -> CleaningRules:
    """Layer configured defaults, a JSON rules payload and command-line flags; flags win."""
    defaults = CleaningRules.defaults().to_dict()
    payload = dict(defaults)
    if args.rules_json:
        try:
            with open(args.rules_json, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except OSError as exc:
            raise InvalidRuleError(f"Cannot read rules file {args.rules_json}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise InvalidRuleError(f"{args.rules_json} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise InvalidRuleError(f"{args.rules_json} must hold a JSON object")
        payload = {**defaults, **payload}

    if args.remove_duplicates:
        payload["removeDuplicates"] = True
    if args.remove_empty_rows:
        payload["removeEmptyRows"] = True
    if args.trim_whitespace:
        payload["trimWhitespace"] = True
    if args.handle_missing:
        payload["handleMissing"] = args.handle_missing
    return CleaningRules.from_dict(payload)


def print_history(history: JobHistory) -> None:
    jobs = history.list_jobs(HISTORY_LIMIT)
    if not jobs:
        print("No cleaning jobs recorded.")
        return
    print(f"\n{'='*60}")
    print("  CLEANING JOBS")
    print(f"{'='*60}")
    for job in jobs:
        print(
            f"  {job['job_id']}  |  {job['original_row_count']} -> "
            f"{job['cleaned_row_count']} rows  |  {job['created_at']}"
        )
    print()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the cleaner."""
    configure_logging()
    args = parse_args(argv)
    logger = logging.getLogger(__name__)

    history = JobHistory()
    if args.history:
        print_history(history)
        return 0

    if not args.input:
        logger.error("--input is required unless --history is given")
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input file not found: %s", input_path)
        return 1

    try:
        rules = build_rules(args)
        pipeline = CleaningPipeline(rules, output_dir=Path(args.output_dir), history=history)
        result = pipeline.run(input_path)
    except InvalidRuleError as exc:
        logger.error("Invalid cleaning rules: %s", exc)
        return 2
    except MalformedInputError as exc:
        logger.error("Malformed CSV input: %s", exc)
        return 1
    except PipelineError as exc:
        logger.error("Cleaning job failed: %s", exc)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.report)
    logger.info("Cleaned file saved to %s", result.cleaned_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
