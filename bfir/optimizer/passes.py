"""Local rewrite rules applied by the peephole engine.

Each pass is a pure function from a window of instructions to either a
:class:`Replace` describing how many leading instructions to swap out, or
``None`` when the window does not match.  The pass set is closed; passes are
identified by :class:`PassKind` and looked up by name through :func:`get_pass`.

``adjacent_merge``
    Two consecutive :class:`~bfir.ir.model.CellOp` nodes are folded into one
    using the composition algebra.  A merge that cancels out completely removes
    both nodes.

``zeroing_loop_reduction``
    ``[-]`` style loops whose body only adds an odd delta to the current cell
    always reach zero, so they are replaced by an explicit ``SetAbs(0)``.  Even
    deltas may cycle forever (``[--]`` starting at 1 never terminates) and are
    left alone.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..constants import CELL_MODULUS
from ..ir.model import Add, CellOp, Instruction, Loop, SetAbs


@dataclass(frozen=True)
class Replace:
    """Replace the first ``count`` instructions of the window with ``new``."""

    count: int
    new: Tuple[Instruction, ...] = ()


Rewrite = Callable[[Sequence[Instruction]], Optional[Replace]]


class PassKind(Enum):
    ADJACENT_MERGE = "adjacent_merge"
    ZEROING_LOOP_REDUCTION = "zeroing_loop_reduction"


@dataclass(frozen=True)
class PeepholePass:
    """A rewrite rule together with the smallest window it inspects."""

    kind: PassKind
    rewrite: Rewrite
    min_tokens: int = 1

    @property
    def name(self) -> str:
        return self.kind.value

    def apply(self, window: Sequence[Instruction]) -> Optional[Replace]:
        return self.rewrite(window)


# ---------------------------------------------------------------------------
# rewrite rules
# ---------------------------------------------------------------------------


def merge_adjacent(window: Sequence[Instruction]) -> Optional[Replace]:
    first, second = window[0], window[1]
    if not isinstance(first, CellOp) or not isinstance(second, CellOp):
        return None
    merged = first.then(second)
    if merged is None:
        return Replace(2)
    return Replace(2, (merged,))


def terminates_by_addition(delta: int) -> bool:
    """Return ``True`` when repeatedly adding ``delta`` reaches zero from any cell value.

    The orbit of ``delta`` modulo 256 covers every residue exactly when the
    two are coprime, i.e. when ``delta`` is odd.
    """

    return math.gcd(delta, CELL_MODULUS) == 1


ZERO_CELL = CellOp({0: SetAbs(0)}, 0)


def reduce_zeroing_loop(window: Sequence[Instruction]) -> Optional[Replace]:
    loop = window[0]
    if not isinstance(loop, Loop) or len(loop.body) != 1:
        return None
    body = loop.body[0]
    if not isinstance(body, CellOp) or body.ptr_shift != 0 or len(body.ops) != 1:
        return None
    offset, operation = body.ops[0]
    if offset != 0 or not isinstance(operation, Add):
        return None
    if not terminates_by_addition(operation.delta):
        return None
    return Replace(1, (ZERO_CELL,))


ADJACENT_MERGE = PeepholePass(PassKind.ADJACENT_MERGE, merge_adjacent, min_tokens=2)
ZEROING_LOOP_REDUCTION = PeepholePass(PassKind.ZEROING_LOOP_REDUCTION, reduce_zeroing_loop)

PASSES: Dict[str, PeepholePass] = {
    ADJACENT_MERGE.name: ADJACENT_MERGE,
    ZEROING_LOOP_REDUCTION.name: ZEROING_LOOP_REDUCTION,
}

# Order matters: the reduction expects merged loop bodies, and its output is
# folded into neighbouring nodes by the second merge.
DEFAULT_PIPELINE: Tuple[PeepholePass, ...] = (
    ADJACENT_MERGE,
    ZEROING_LOOP_REDUCTION,
    ADJACENT_MERGE,
)


def get_pass(name: str) -> PeepholePass:
    try:
        return PASSES[name]
    except KeyError:
        known = ", ".join(sorted(PASSES))
        raise ValueError(f"unknown optimisation pass '{name}' (known: {known})") from None


__all__ = [
    "Replace",
    "Rewrite",
    "PassKind",
    "PeepholePass",
    "merge_adjacent",
    "reduce_zeroing_loop",
    "terminates_by_addition",
    "ZERO_CELL",
    "ADJACENT_MERGE",
    "ZEROING_LOOP_REDUCTION",
    "PASSES",
    "DEFAULT_PIPELINE",
    "get_pass",
]
