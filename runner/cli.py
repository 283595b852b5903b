"""Command line entry point: ``python -m runner``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import ValidationError

from scenario.dsl.loader import load_scenario

from .config import load_config
from .orchestrator import run_batch, write_report
from .session import session_factory

EXAMPLES = """
Examples:
  # Run a scenario three times and write results under ./output/search
  python -m runner --config=scenarios/search.yaml --output=output/search --runs=3
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m runner",
        description="Run a browser scenario repeatedly and report flaky failures",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to the scenario file (JSON or YAML)")
    parser.add_argument("--output", type=Path, help="Directory receiving run-N folders and report.txt")
    parser.add_argument("--runs", type=int, default=None, help="Number of runs (default from settings, 1)")
    parser.add_argument(
        "--headless",
        choices=("true", "false"),
        default=None,
        help="Run the browser headless (default true)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log page console output and per-action details")
    parser.add_argument("--settings", type=Path, default=None, help="Runner settings TOML (default runner.toml)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is None or args.output is None:
        parser.error("--config and --output are required")

    try:
        config = load_config(args.settings)
    except (OSError, ValueError) as exc:
        parser.error(f"invalid settings: {exc}")
    if args.headless is not None:
        config.headless = args.headless == "true"
    if args.verbose:
        config.verbose = True
    runs = args.runs if args.runs is not None else config.runs
    if runs < 1:
        parser.error("--runs must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        scenario = load_scenario(args.config)
    except FileNotFoundError:
        parser.error(f"scenario file not found: {args.config}")
    except (ValidationError, ValueError, yaml.YAMLError) as exc:
        parser.error(f"invalid scenario {args.config}: {exc}")

    batch = run_batch(scenario, runs, args.output, session_factory=session_factory(config), config=config)
    write_report(batch, args.output)

    print("===========")
    print(batch.summary(), end="")
    return 0 if batch.all_passed else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
