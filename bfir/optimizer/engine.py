"""Drive peephole passes over a program tree."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..ir.model import Instruction, Loop, Program
from .passes import DEFAULT_PIPELINE, PeepholePass


logger = logging.getLogger(__name__)


class PassContractError(RuntimeError):
    """A pass asked to replace more instructions than its window holds."""

    def __init__(self, pass_name: str, index: int, depth: int, count: int, remaining: int) -> None:
        super().__init__(
            f"pass '{pass_name}' requested replacing {count} instructions at index {index}"
            f" (depth {depth}) but only {remaining} remain"
        )
        self.pass_name = pass_name
        self.index = index
        self.depth = depth
        self.count = count
        self.remaining = remaining


class _Window(SequenceABC):
    """Read-only view of ``items[start:]`` that avoids copying the tail."""

    __slots__ = ("_items", "_start")

    def __init__(self, items: List[Instruction], start: int) -> None:
        self._items = items
        self._start = start

    def __len__(self) -> int:
        return len(self._items) - self._start

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._items[self._start :][index]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("window index out of range")
        return self._items[self._start + index]


class _Frame:
    """Working copy of one scope while a pass walks it."""

    __slots__ = ("program", "items", "index", "changed")

    def __init__(self, program: Program) -> None:
        self.program = program
        self.items: List[Instruction] = list(program.instructions)
        self.index = 0
        self.changed = False

    def finish(self) -> Program:
        if not self.changed:
            return self.program
        return Program(tuple(self.items))


def apply_pass(program: Program, pass_: PeepholePass) -> Program:
    """Apply ``pass_`` to every window of ``program`` and its loop bodies.

    At each index the pass runs until it stops matching, splicing each
    replacement in immediately.  If the instruction left at that index is a
    loop, its body is processed the same way before moving on.  Scopes the
    pass did not touch are returned as the original objects.
    """

    stack: List[_Frame] = [_Frame(program)]
    while True:
        frame = stack[-1]
        if frame.index >= len(frame.items):
            stack.pop()
            result = frame.finish()
            if not stack:
                return result
            parent = stack[-1]
            loop = parent.items[parent.index]
            if result is not loop.body:
                parent.items[parent.index] = Loop(result)
                parent.changed = True
            parent.index += 1
            continue

        _rewrite_at(frame, pass_, depth=len(stack) - 1)
        if frame.index < len(frame.items):
            current = frame.items[frame.index]
            if isinstance(current, Loop):
                stack.append(_Frame(current.body))
                continue
        frame.index += 1


def _rewrite_at(frame: _Frame, pass_: PeepholePass, *, depth: int) -> None:
    while True:
        remaining = len(frame.items) - frame.index
        if remaining < pass_.min_tokens:
            return
        replacement = pass_.apply(_Window(frame.items, frame.index))
        if replacement is None:
            return
        if not 0 < replacement.count <= remaining:
            raise PassContractError(
                pass_.name, frame.index, depth, replacement.count, remaining
            )
        frame.items[frame.index : frame.index + replacement.count] = replacement.new
        frame.changed = True


@dataclass(frozen=True)
class PassReport:
    """Timing and size of a single pass application."""

    name: str
    before: int
    after: int
    elapsed: float

    def describe(self) -> str:
        return (
            f"pass {self.name}: total {self.before} -> {self.after}"
            f" elapsed={self.elapsed * 1000:.3f}ms"
        )


class PassPipeline:
    """Run a sequence of passes one at a time.

    :meth:`apply_next` exposes the program after every pass so intermediate
    states can be inspected or benchmarked individually.
    """

    def __init__(self, passes: Optional[Sequence[PeepholePass]] = None) -> None:
        self.passes = tuple(DEFAULT_PIPELINE if passes is None else passes)
        self.reports: List[PassReport] = []
        self._position = 0

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self.passes)

    def apply_next(self, program: Program) -> Optional[Program]:
        """Apply the next pass, or return ``None`` once every pass has run."""

        if self.exhausted:
            return None
        pass_ = self.passes[self._position]
        self._position += 1

        start = time.perf_counter()
        result = apply_pass(program, pass_)
        elapsed = time.perf_counter() - start

        report = PassReport(
            name=pass_.name,
            before=program.total_len(),
            after=result.total_len(),
            elapsed=elapsed,
        )
        self.reports.append(report)
        logger.debug("%s", report.describe())
        return result

    def run(self, program: Program) -> Program:
        """Apply every remaining pass and return the final program."""

        start = time.perf_counter()
        while True:
            result = self.apply_next(program)
            if result is None:
                break
            program = result
        logger.debug("optimisation finished in %.3fms", (time.perf_counter() - start) * 1000)
        return program

    def describe(self) -> str:
        if not self.reports:
            return "no passes applied"
        return "\n".join(report.describe() for report in self.reports)


def optimize(program: Program, passes: Optional[Sequence[PeepholePass]] = None) -> Program:
    """Run ``passes`` (the default pipeline when omitted) over ``program``."""

    return PassPipeline(passes).run(program)


__all__ = [
    "PassContractError",
    "apply_pass",
    "PassReport",
    "PassPipeline",
    "optimize",
]
