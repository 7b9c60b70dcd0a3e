"""Public package exports for the BF parser, optimiser and interpreter."""

from .config import RunConfig
from .fixtures import FixtureCase, FixtureResult, discover, run_suite
from .interpreter import ExecutionReport, Interpreter, Tape, run_program
from .ir import CellOp, IRTextRenderer, Loop, Program, ProgramMetrics, fuse, parse_program
from .optimizer import PassContractError, PassPipeline, optimize
from .parser import RawScope, parse
from .program_io import EndOfInputError, EOIPolicy, ProgramIO

__version__ = "0.1.0"

__all__ = [
    "RunConfig",
    "FixtureCase",
    "FixtureResult",
    "discover",
    "run_suite",
    "ExecutionReport",
    "Interpreter",
    "Tape",
    "run_program",
    "CellOp",
    "Loop",
    "Program",
    "ProgramMetrics",
    "IRTextRenderer",
    "fuse",
    "parse_program",
    "PassContractError",
    "PassPipeline",
    "optimize",
    "RawScope",
    "parse",
    "EndOfInputError",
    "EOIPolicy",
    "ProgramIO",
]
