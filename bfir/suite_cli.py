"""Run every fixture program in a directory and report PASS/FAIL per case."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import RunConfig, parse_pass_names
from .fixtures import discover, run_suite
from .program_io import EndOfInputError


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("directory", type=Path, help="Directory holding .b/.in/.out fixtures")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON run configuration applied to every case",
    )
    parser.add_argument("--no-opt", action="store_true", help="Run the unoptimised program")
    parser.add_argument(
        "--passes",
        default=None,
        help="Comma separated optimisation passes overriding the default pipeline",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser.parse_args(argv)


def configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args)

    try:
        config = RunConfig.load(args.config) if args.config else RunConfig()
        config = config.with_overrides(
            optimize=False if args.no_opt else None,
            passes=parse_pass_names(args.passes) if args.passes is not None else None,
        )
        cases = discover(args.directory)
        results = run_suite(cases, config)
    except (ValueError, EndOfInputError, OSError) as exc:
        raise SystemExit(f"error: {exc}") from None

    failures = 0
    for result in results:
        print(result.describe())
        if not result.passed:
            failures += 1
    print(f"{len(results) - failures}/{len(results)} fixtures passed")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
