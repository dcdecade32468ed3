#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from depmatrix.app import analyze_claims_file, build_pipeline, show_rules, update_rules
from depmatrix.config import ScoringStrategy, configure_logging, get_scoring_config
from depmatrix.domain.scoring import RuleConfigError, parse_rule_assignments

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build an application dependency matrix")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Infer dependencies from a claims file")
    analyze.add_argument(
        "path",
        type=Path,
        help="JSON array or JSON Lines file of claim records",
    )
    analyze.add_argument(
        "--scoring",
        choices=[strategy.value for strategy in ScoringStrategy],
        help="Scoring strategy to use (defaults to config)",
    )
    analyze.add_argument(
        "--rules-file",
        type=Path,
        help="Rules file for the dynamic scoring strategy (defaults to the data directory)",
    )

    rules = subparsers.add_parser("rules", help="Inspect or update dynamic scoring rules")
    rules_sub = rules.add_subparsers(dest="rules_command", required=True)
    rules_show = rules_sub.add_parser("show", help="Print the current rule configuration")
    rules_show.add_argument("--rules-file", type=Path, help="Rules file to read")
    rules_set = rules_sub.add_parser("set", help="Update and persist rule values")
    rules_set.add_argument(
        "assignments",
        nargs="+",
        metavar="KEY=VALUE",
        help="Rule values to change, e.g. codebase_boost=0.25",
    )
    rules_set.add_argument("--rules-file", type=Path, help="Rules file to update")

    return parser.parse_args(list(argv))


def _run_analyze(args: argparse.Namespace) -> None:
    scoring_config = get_scoring_config()
    if args.scoring is not None:
        scoring_config = replace(scoring_config, strategy=ScoringStrategy(args.scoring))
    pipeline = build_pipeline(scoring_config=scoring_config, rules_path=args.rules_file)
    matrix = analyze_claims_file(args.path, pipeline=pipeline)
    print(json.dumps(matrix.as_dict(), indent=2))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    updates: dict[str, object] = {}
    try:
        parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])
        if parsed_args.command == "rules" and parsed_args.rules_command == "set":
            updates = parse_rule_assignments(parsed_args.assignments)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        if parsed_args.command == "analyze":
            _run_analyze(parsed_args)
        elif parsed_args.command == "rules" and parsed_args.rules_command == "show":
            print(show_rules(rules_path=parsed_args.rules_file).to_json())
        elif parsed_args.command == "rules" and parsed_args.rules_command == "set":
            try:
                config = update_rules(updates, rules_path=parsed_args.rules_file)
            except RuleConfigError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                sys.exit(2)
            print(config.to_json())
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
