"""Tree-walking executor for fused programs."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from .config import RunConfig
from .constants import CELL_MASK, TAPE_LEN
from .ir.fuser import parse_program
from .ir.model import Add, CellOp, Loop, Program, Read, Write
from .parser import Source
from .program_io import ProgramIO

logger = logging.getLogger(__name__)


class Tape:
    """Fixed length ring of byte cells with a pointer.

    Both the pointer and cell offsets wrap around the tape, so no access is
    ever out of bounds.
    """

    def __init__(self, length: int = TAPE_LEN) -> None:
        if length <= 0:
            raise ValueError("tape length must be positive")
        self.length = length
        self.cells = bytearray(length)
        self.pointer = 0

    @property
    def current(self) -> int:
        return self.cells[self.pointer]

    @current.setter
    def current(self, value: int) -> None:
        self.cells[self.pointer] = value & CELL_MASK

    def index(self, offset: int) -> int:
        return (self.pointer + offset) % self.length

    def move(self, shift: int) -> None:
        self.pointer = (self.pointer + shift) % self.length

    def apply(self, node: CellOp) -> None:
        cells = self.cells
        for offset, operation in node.ops:
            target = (self.pointer + offset) % self.length
            if isinstance(operation, Add):
                cells[target] = (cells[target] + operation.delta) & CELL_MASK
            else:
                cells[target] = operation.value
        if node.ptr_shift:
            self.move(node.ptr_shift)


@dataclass(frozen=True)
class ExecutionReport:
    """Summary of a finished run."""

    steps: int
    elapsed: float
    pointer: int

    def describe(self) -> str:
        return (
            f"executed {self.steps} instructions in {self.elapsed * 1000:.3f}ms"
            f" (pointer={self.pointer})"
        )


class Interpreter:
    """Execute ``program`` against a fresh tape.

    Loops are checked before every iteration, including the first.  Nesting
    is tracked with an explicit frame stack so deeply nested programs do not
    exhaust the Python call stack.  I/O errors raised by ``io`` propagate out
    of :meth:`run` unchanged.
    """

    def __init__(
        self,
        program: Program,
        io: ProgramIO,
        *,
        tape_len: int = TAPE_LEN,
        tape: Optional[Tape] = None,
    ) -> None:
        self.program = program
        self.io = io
        self.tape = tape if tape is not None else Tape(tape_len)

    def run(self) -> ExecutionReport:
        start = time.perf_counter()
        try:
            steps = self._execute()
        finally:
            self.io.flush()
        report = ExecutionReport(
            steps=steps,
            elapsed=time.perf_counter() - start,
            pointer=self.tape.pointer,
        )
        logger.debug("%s", report.describe())
        return report

    def _execute(self) -> int:
        tape = self.tape
        cells = tape.cells
        io = self.io
        steps = 0
        # Each frame is [instructions, position].  A loop frame is pushed
        # while the parent position still points at the loop, so returning
        # from the body re-tests the condition.
        frames: List[list] = [[self.program.instructions, 0]]
        while frames:
            frame = frames[-1]
            instructions, position = frame
            if position >= len(instructions):
                frames.pop()
                continue
            instruction = instructions[position]
            steps += 1
            if isinstance(instruction, CellOp):
                tape.apply(instruction)
            elif isinstance(instruction, Loop):
                if cells[tape.pointer]:
                    frames.append([instruction.body.instructions, 0])
                    continue
            elif isinstance(instruction, Read):
                cells[tape.pointer] = io.read_byte()
            elif isinstance(instruction, Write):
                io.write_byte(cells[tape.pointer])
            else:
                raise TypeError(f"unsupported instruction: {instruction!r}")
            frame[1] = position + 1
        return steps


def run_program(
    source: Source,
    data: bytes = b"",
    *,
    config: Optional[RunConfig] = None,
    optimize: Optional[bool] = None,
) -> bytes:
    """Parse, optimise and run ``source`` with ``data`` as input; return its output."""

    config = (config or RunConfig()).with_overrides(optimize=optimize)
    program = config.build_pipeline().run(parse_program(source))
    io = ProgramIO.from_bytes(data, config.eoi)
    Interpreter(program, io, tape_len=config.tape_len).run()
    return io.output()


__all__ = ["Tape", "ExecutionReport", "Interpreter", "run_program"]
