#!/usr/bin/env python3
"""Command-line interface for the BF optimising interpreter."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from bfir import IRTextRenderer, ProgramMetrics, RunConfig, parse_program
from bfir.config import parse_pass_names
from bfir.interpreter import Interpreter
from bfir.program_io import EndOfInputError, EOIPolicy, ProgramIO, stdio


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("program", type=Path, help="BF source file to execute")
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Read program input from this file instead of stdin",
    )
    parser.add_argument(
        "--eoi",
        default=None,
        help="End-of-input policy: fail, emit, emit:<byte> or a byte value",
    )
    parser.add_argument("--tape-len", type=int, default=None, help="Number of tape cells")
    parser.add_argument("--no-opt", action="store_true", help="Skip the peephole optimiser")
    parser.add_argument(
        "--passes",
        default=None,
        help="Comma separated optimisation passes overriding the default pipeline",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON run configuration; command line options take precedence",
    )
    parser.add_argument(
        "--ir-out",
        type=Path,
        default=None,
        help="Write the optimised IR listing to this path",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print program metrics and timings to stderr",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser.parse_args(argv)


def configure_logging(args: argparse.Namespace) -> None:
    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_config(args: argparse.Namespace) -> RunConfig:
    config = RunConfig.load(args.config) if args.config else RunConfig()
    return config.with_overrides(
        tape_len=args.tape_len,
        eoi=EOIPolicy.parse(args.eoi) if args.eoi is not None else None,
        optimize=False if args.no_opt else None,
        passes=parse_pass_names(args.passes) if args.passes is not None else None,
    )


def validate_inputs(args: argparse.Namespace) -> None:
    for path in (args.program, args.input, args.config):
        if path is not None and not path.exists():
            raise SystemExit(f"missing input file: {path}")


def run(args: argparse.Namespace, stdin: Optional[BinaryIO] = None) -> None:
    config = build_config(args)
    program = parse_program(args.program.read_bytes())
    pipeline = config.build_pipeline()
    program = pipeline.run(program)

    if args.ir_out:
        IRTextRenderer(include_metrics=True).write(program, args.ir_out)
        print(f"ir written to {args.ir_out}", file=sys.stderr)

    if stdin is None:
        io = stdio(config.eoi)
    else:
        io = ProgramIO(stdin, sys.stdout.buffer, config.eoi)
    report = Interpreter(program, io, tape_len=config.tape_len).run()

    if args.stats:
        print(ProgramMetrics.of(program).describe(), file=sys.stderr)
        print(pipeline.describe(), file=sys.stderr)
        print(report.describe(), file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args)
    validate_inputs(args)

    try:
        if args.input is not None:
            with args.input.open("rb") as stdin:
                run(args, stdin)
        else:
            run(args)
    except (ValueError, EndOfInputError) as exc:
        raise SystemExit(f"error: {exc}") from None


if __name__ == "__main__":
    main()
