"""Fold raw per-character instructions into fused :class:`CellOp` nodes."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from ..parser import RawLoop, RawOp, RawScope, Source, parse
from .model import READ, WRITE, Add, CellOp, CellOperation, Instruction, Loop, Program, compose


class CellOpBuilder:
    """Accumulate a straight-line run of ``+ - < >`` commands.

    Offsets are recorded relative to the pointer at the start of the run,
    i.e. keyed by the shift accumulated before the command is applied.
    """

    def __init__(self) -> None:
        self.ops: Dict[int, CellOperation] = {}
        self.ptr_shift = 0

    def add(self, delta: int) -> None:
        prior = self.ops.get(self.ptr_shift)
        step = Add(delta)
        self.ops[self.ptr_shift] = step if prior is None else compose(prior, step)

    def move(self, shift: int) -> None:
        self.ptr_shift += shift

    def flush(self) -> Optional[CellOp]:
        """Return the accumulated node (``None`` for a no-op) and reset."""

        node = CellOp.build(self.ops, self.ptr_shift)
        self.ops = {}
        self.ptr_shift = 0
        return node


def fuse(raw: RawScope) -> Program:
    """Convert a raw tree into the fused IR.

    ``,`` ``.`` and ``[`` end the current run; a run that cancels out entirely
    (``><``, ``+-``) produces no instruction at all.
    """

    # Each frame holds the raw iterator, the instructions emitted so far and
    # the builder for the run in progress.
    stack: List[Tuple[Iterator, List[Instruction], CellOpBuilder]] = [
        (iter(raw), [], CellOpBuilder())
    ]
    while True:
        items, emitted, builder = stack[-1]
        item = next(items, None)
        if item is None:
            _flush(builder, emitted)
            stack.pop()
            program = Program(tuple(emitted))
            if not stack:
                return program
            stack[-1][1].append(Loop(program))
            continue

        if item is RawOp.INC:
            builder.add(1)
        elif item is RawOp.DEC:
            builder.add(-1)
        elif item is RawOp.RIGHT:
            builder.move(1)
        elif item is RawOp.LEFT:
            builder.move(-1)
        elif item is RawOp.READ:
            _flush(builder, emitted)
            emitted.append(READ)
        elif item is RawOp.WRITE:
            _flush(builder, emitted)
            emitted.append(WRITE)
        elif isinstance(item, RawLoop):
            _flush(builder, emitted)
            stack.append((iter(item.body), [], CellOpBuilder()))


def _flush(builder: CellOpBuilder, emitted: List[Instruction]) -> None:
    node = builder.flush()
    if node is not None:
        emitted.append(node)


def parse_program(source: Source) -> Program:
    """Parse ``source`` and return the fused, unoptimised program."""

    return fuse(parse(source))


__all__ = ["CellOpBuilder", "fuse", "parse_program"]
