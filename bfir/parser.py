"""Turn BF source bytes into a raw, per-character instruction tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Dict, Iterator, List, Tuple, Union

from .constants import DEC, INC, LEFT, LOOP_CLOSE, LOOP_OPEN, READ, RIGHT, WRITE

_CHUNK_SIZE = 64 * 1024

Source = Union[bytes, bytearray, memoryview, str, BinaryIO]


class RawOp(Enum):
    """Primitive command corresponding to a single source character."""

    INC = "+"
    DEC = "-"
    RIGHT = ">"
    LEFT = "<"
    READ = ","
    WRITE = "."

    @property
    def char(self) -> str:
        return self.value


_BYTE_TO_OP: Dict[int, RawOp] = {
    INC: RawOp.INC,
    DEC: RawOp.DEC,
    RIGHT: RawOp.RIGHT,
    LEFT: RawOp.LEFT,
    READ: RawOp.READ,
    WRITE: RawOp.WRITE,
}


@dataclass(frozen=True)
class RawLoop:
    """``[`` ... ``]`` with its parsed body."""

    body: "RawScope"


RawItem = Union[RawOp, RawLoop]


@dataclass(frozen=True)
class RawScope:
    """Immutable list of raw instructions making up one nesting level."""

    items: Tuple[RawItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[RawItem]:
        return iter(self.items)

    def __getitem__(self, index: int) -> RawItem:
        return self.items[index]

    def to_source(self) -> bytes:
        """Render the scope back into canonical BF text without comments."""

        parts: List[str] = []
        # (iterator, closing) pairs; a closing bracket is emitted once the
        # iterator of a loop body is exhausted.
        stack: List[Tuple[Iterator[RawItem], str]] = [(iter(self.items), "")]
        while stack:
            items, closing = stack[-1]
            item = next(items, None)
            if item is None:
                stack.pop()
                parts.append(closing)
                continue
            if isinstance(item, RawLoop):
                parts.append("[")
                stack.append((iter(item.body.items), "]"))
            else:
                parts.append(item.char)
        return "".join(parts).encode("ascii")


def parse(source: Source) -> RawScope:
    """Parse ``source`` into a :class:`RawScope` tree.

    Only the eight command characters are significant, everything else is a
    comment.  An unmatched ``]`` terminates the top level scope and the rest
    of the input is ignored.  Loops still open at the end of the stream are
    closed implicitly.
    """

    stack: List[List[RawItem]] = [[]]
    for byte in _iter_bytes(source):
        if byte == LOOP_OPEN:
            stack.append([])
        elif byte == LOOP_CLOSE:
            if len(stack) == 1:
                break
            body = stack.pop()
            stack[-1].append(RawLoop(RawScope(tuple(body))))
        else:
            op = _BYTE_TO_OP.get(byte)
            if op is not None:
                stack[-1].append(op)

    while len(stack) > 1:
        body = stack.pop()
        stack[-1].append(RawLoop(RawScope(tuple(body))))
    return RawScope(tuple(stack[0]))


def _iter_bytes(source: Source) -> Iterator[int]:
    if isinstance(source, str):
        yield from source.encode("utf-8")
        return
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield from bytes(source)
        return
    while True:
        chunk = source.read(_CHUNK_SIZE)
        if not chunk:
            return
        yield from chunk


__all__ = ["RawOp", "RawLoop", "RawItem", "RawScope", "parse"]
