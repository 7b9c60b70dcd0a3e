"""Dataclasses describing the fused intermediate representation.

A :class:`Program` is an immutable tuple of instructions.  Loop bodies are
programs themselves which gives a tree.  Rewrites never touch a published
program in place; they build a new :class:`Program` that reuses the
instruction objects it did not change, so copying a program is free and
unchanged loop bodies are shared between revisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..constants import wrap_cell, wrap_delta


# ---------------------------------------------------------------------------
# cell operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Add:
    """Add a wrapping signed byte to a cell."""

    delta: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "delta", wrap_delta(self.delta))

    def apply(self, value: int) -> int:
        return wrap_cell(value + self.delta)

    def describe(self) -> str:
        return f"{self.delta:+d}"


@dataclass(frozen=True)
class SetAbs:
    """Overwrite a cell with an absolute byte value."""

    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", wrap_cell(self.value))

    def apply(self, value: int) -> int:
        return self.value

    def describe(self) -> str:
        return f"={self.value}"


CellOperation = Union[Add, SetAbs]


def compose(first: CellOperation, second: CellOperation) -> CellOperation:
    """Return the single operation equivalent to ``first`` followed by ``second``."""

    if isinstance(second, SetAbs):
        return second
    if isinstance(first, SetAbs):
        return SetAbs(first.value + second.delta)
    return Add(first.delta + second.delta)


def _is_identity(operation: CellOperation) -> bool:
    return isinstance(operation, Add) and operation.delta == 0


# ---------------------------------------------------------------------------
# instructions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Instruction:
    """Base class for IR instructions.

    Only used to make signatures explicit; dispatch happens on the concrete
    subclasses.
    """


@dataclass(frozen=True)
class CellOp(Instruction):
    """Fused run of cell updates followed by a pointer move.

    ``ops`` maps offsets relative to the pointer on entry to an operation.  It
    is stored as a tuple of ``(offset, operation)`` pairs sorted by offset so
    the node stays hashable; :attr:`mapping` exposes it as a dictionary.
    ``Add(0)`` entries carry no effect and are dropped on construction.
    """

    ops: Tuple[Tuple[int, CellOperation], ...] = ()
    ptr_shift: int = 0

    def __post_init__(self) -> None:
        pairs = self.ops.items() if isinstance(self.ops, Mapping) else self.ops
        entries: Dict[int, CellOperation] = {}
        for offset, operation in pairs:
            if offset in entries:
                raise ValueError(f"duplicate cell offset {offset}")
            entries[offset] = operation
        normalised = tuple(
            (offset, entries[offset])
            for offset in sorted(entries)
            if not _is_identity(entries[offset])
        )
        object.__setattr__(self, "ops", normalised)

    @classmethod
    def build(
        cls, ops: Mapping[int, CellOperation], ptr_shift: int = 0
    ) -> Optional["CellOp"]:
        """Create a node, or return ``None`` when the result would be a no-op."""

        node = cls(dict(ops), ptr_shift)
        if node.is_noop:
            return None
        return node

    @property
    def mapping(self) -> Dict[int, CellOperation]:
        return dict(self.ops)

    @property
    def is_noop(self) -> bool:
        return not self.ops and self.ptr_shift == 0

    @property
    def is_move(self) -> bool:
        return not self.ops and self.ptr_shift != 0

    def get(self, offset: int) -> Optional[CellOperation]:
        for key, operation in self.ops:
            if key == offset:
                return operation
        return None

    def then(self, other: "CellOp") -> Optional["CellOp"]:
        """Merge ``other`` executed right after ``self`` into a single node.

        ``other``'s offsets are relative to the pointer after ``self`` moved it,
        so they are rebased by ``self.ptr_shift`` before composing.
        """

        merged = self.mapping
        for offset, operation in other.ops:
            target = offset + self.ptr_shift
            prior = merged.get(target)
            merged[target] = operation if prior is None else compose(prior, operation)
        return CellOp.build(merged, self.ptr_shift + other.ptr_shift)

    def describe(self) -> str:
        parts = ["cell"]
        parts.extend(f"{offset}:{operation.describe()}" for offset, operation in self.ops)
        if self.ptr_shift:
            parts.append(f">{self.ptr_shift}")
        return " ".join(parts)


@dataclass(frozen=True)
class Read(Instruction):
    """Consume one input byte into the current cell."""

    def describe(self) -> str:
        return "read"


@dataclass(frozen=True)
class Write(Instruction):
    """Emit the current cell."""

    def describe(self) -> str:
        return "write"


@dataclass(frozen=True)
class Loop(Instruction):
    """Run ``body`` while the current cell is non-zero."""

    body: "Program"

    def describe(self) -> str:
        return f"loop ({len(self.body)} instructions)"


READ = Read()
WRITE = Write()


# ---------------------------------------------------------------------------
# programs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Program:
    """Immutable instruction sequence; loop bodies nest further programs."""

    instructions: Tuple[Instruction, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.instructions, tuple):
            object.__setattr__(self, "instructions", tuple(self.instructions))

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def copy(self) -> "Program":
        # Programs are never mutated, so a copy is the same handle.
        return self

    def splice(self, index: int, count: int, new: Iterable[Instruction]) -> "Program":
        """Return a program with ``count`` instructions at ``index`` replaced."""

        head = self.instructions[:index]
        tail = self.instructions[index + count :]
        return Program(head + tuple(new) + tail)

    def with_item(self, index: int, instruction: Instruction) -> "Program":
        return self.splice(index, 1, (instruction,))

    def walk(self) -> Iterator[Tuple[int, "Program"]]:
        """Yield ``(depth, scope)`` for this program and every nested body.

        Scopes are produced in source order (pre-order).
        """

        stack: List[Tuple[int, Program]] = [(0, self)]
        while stack:
            depth, scope = stack.pop()
            yield depth, scope
            bodies = [ins.body for ins in scope.instructions if isinstance(ins, Loop)]
            for body in reversed(bodies):
                stack.append((depth + 1, body))

    def total_len(self) -> int:
        """Recursive instruction count; each loop counts as ``1 + len(body)``."""

        return sum(len(scope) for _, scope in self.walk())

    def max_depth(self) -> int:
        return max(depth for depth, _ in self.walk())

    def largest_subscope(self) -> "Program":
        """Return the scope (this one included) with the most direct instructions."""

        largest = self
        for _, scope in self.walk():
            if len(scope) > len(largest):
                largest = scope
        return largest

    def render(self) -> List[str]:
        from .printer import IRTextRenderer

        return IRTextRenderer().render_lines(self)


@dataclass(frozen=True)
class ProgramMetrics:
    """Size summary of a program, reported by ``--stats`` and IR dumps."""

    instructions: int
    total: int
    loops: int
    cell_ops: int
    max_depth: int
    largest_scope: int

    @classmethod
    def of(cls, program: Program) -> "ProgramMetrics":
        loops = 0
        cell_ops = 0
        total = 0
        depth = 0
        largest = 0
        for scope_depth, scope in program.walk():
            total += len(scope)
            depth = max(depth, scope_depth)
            largest = max(largest, len(scope))
            for instruction in scope:
                if isinstance(instruction, Loop):
                    loops += 1
                elif isinstance(instruction, CellOp):
                    cell_ops += 1
        return cls(
            instructions=len(program),
            total=total,
            loops=loops,
            cell_ops=cell_ops,
            max_depth=depth,
            largest_scope=largest,
        )

    def describe(self) -> str:
        return (
            f"instructions={self.instructions} total={self.total} loops={self.loops} "
            f"cell_ops={self.cell_ops} depth={self.max_depth} "
            f"largest_scope={self.largest_scope}"
        )


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
]
