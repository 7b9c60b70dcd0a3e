"""Public exports for the fused intermediate representation."""

from .model import (
    READ,
    WRITE,
    Add,
    CellOp,
    CellOperation,
    Instruction,
    Loop,
    Program,
    ProgramMetrics,
    Read,
    SetAbs,
    Write,
    compose,
)
from .fuser import CellOpBuilder, fuse, parse_program
from .printer import IRTextRenderer

__all__ = [
    "Add",
    "SetAbs",
    "CellOperation",
    "compose",
    "Instruction",
    "CellOp",
    "Read",
    "Write",
    "Loop",
    "READ",
    "WRITE",
    "Program",
    "ProgramMetrics",
    "CellOpBuilder",
    "fuse",
    "parse_program",
    "IRTextRenderer",
]
