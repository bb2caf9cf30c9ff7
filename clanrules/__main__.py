"""
CLI interface for rule reviews.

Usage:
    python -m clanrules review --config configs/rules.yaml --rows data/import.csv
    python -m clanrules review --rows data/import.csv --output reviewed.csv --no-correct
    python -m clanrules import-list --kind correction --field source lists/source.csv

The config path may also be supplied via CLANRULES_CONFIG (a .env file is read).
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from .config import ConfigError, load_config, load_rule_lists, validate_config
from .lists.parser import ListKind, read_rule_file
from .review.metrics import compute_review_metrics, print_review_report
from .review.session import load_rows_csv, review_rows, reviews_to_dataframe, validation_messages
from .rules.processing import build_rule_processing
from .rules.schemas import CORRECTION_FIELDS

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_review(args) -> int:
    """Correct and validate a CSV of imported rows."""
    config_path = args.config or os.environ.get("CLANRULES_CONFIG")
    if not config_path:
        logger.error("No config given (use --config or set CLANRULES_CONFIG)")
        return 1

    overrides = {"review": {}}
    if args.no_correct:
        overrides["review"]["auto_correct"] = False
    if args.no_validate:
        overrides["review"]["run_validation"] = False
    config = load_config(config_path, overrides=overrides)

    for warning in validate_config(config):
        logger.warning(f"Config warning: {warning}")

    validation_rules, correction_rules, errors = load_rule_lists(config)
    for error in errors:
        logger.warning(f"Rule list error: {error}")

    processing = build_rule_processing(validation_rules, correction_rules)
    df = load_rows_csv(args.rows)
    records = df.to_dict(orient="records")

    reviews = review_rows(
        records,
        processing.validation_evaluator,
        processing.correction_applicator,
        auto_correct=config.review.auto_correct,
        validate=config.review.run_validation,
    )
    metrics = compute_review_metrics(reviews)
    print(print_review_report(metrics))

    messages = validation_messages(reviews)
    for message in messages[:config.review.max_messages]:
        print(f"  {message}")
    if len(messages) > config.review.max_messages:
        print(f"  ... and {len(messages) - config.review.max_messages} more")

    if args.output:
        reviewed = reviews_to_dataframe(df, reviews)
        reviewed.to_csv(args.output, index=False)
        logger.info(f"Wrote reviewed rows to {args.output}")

    if args.json:
        print(json.dumps(metrics.to_dict(), indent=2))

    return 0


def cmd_import_list(args) -> int:
    """Parse a rule list file and print the entries it would import."""
    parsed = read_rule_file(args.file, args.kind, args.field)

    for entry in parsed.entries:
        print(json.dumps(entry.model_dump(exclude_none=True)))
    for error in parsed.errors:
        print(f"ERROR {error}", file=sys.stderr)

    print(f"\n{len(parsed.entries)} entries, {len(parsed.errors)} errors")
    return 0 if parsed.ok else 2


def main(argv=None) -> int:
    """Main CLI entrypoint."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="clanrules",
        description="Validation and correction rules for imported clan data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Review command
    review_parser = subparsers.add_parser("review", help="Correct and validate imported rows")
    review_parser.add_argument("--config", help="Path to config YAML (default: $CLANRULES_CONFIG)")
    review_parser.add_argument("--rows", required=True, help="CSV file with player/source/chest/clan columns")
    review_parser.add_argument("--output", help="Write reviewed rows to this CSV")
    review_parser.add_argument("--no-correct", action="store_true", help="Skip correction rules")
    review_parser.add_argument("--no-validate", action="store_true", help="Skip validation rules")
    review_parser.add_argument("--json", action="store_true", help="Also print metrics as JSON")

    # Import-list command
    import_parser = subparsers.add_parser("import-list", help="Parse a validation or correction list file")
    import_parser.add_argument(
        "--kind",
        required=True,
        choices=[k.value for k in ListKind],
        help="List kind",
    )
    import_parser.add_argument(
        "--field",
        required=True,
        choices=list(CORRECTION_FIELDS),
        help="Field the list belongs to",
    )
    import_parser.add_argument("file", help="CSV/TXT list file")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "review":
            return cmd_review(args)
        if args.command == "import-list":
            return cmd_import_list(args)
    except (ConfigError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
