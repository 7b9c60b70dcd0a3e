"""Byte input/output plumbing handed to the interpreter.

The interpreter only ever reads or writes a single byte at a time.  What
happens when a read runs past the end of the input is configurable through
an :class:`EOIPolicy`: either fail the run, or keep producing a fixed byte
forever (zero being the customary choice).
"""

from __future__ import annotations

import io
import itertools
import sys
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, Optional


class EndOfInputError(EOFError):
    """Raised when a read hits end of input under the ``fail`` policy."""


class EOIKind(Enum):
    FAIL = "fail"
    EMIT = "emit"


@dataclass(frozen=True)
class EOIPolicy:
    """End-of-input behaviour."""

    kind: EOIKind = EOIKind.EMIT
    byte: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.byte <= 0xFF:
            raise ValueError(f"end-of-input byte must be in 0..255, got {self.byte}")

    @classmethod
    def fail(cls) -> "EOIPolicy":
        return cls(EOIKind.FAIL)

    @classmethod
    def emit(cls, byte: int = 0) -> "EOIPolicy":
        return cls(EOIKind.EMIT, byte)

    @classmethod
    def parse(cls, text: str) -> "EOIPolicy":
        """Parse ``fail``, ``emit``, ``emit:<byte>`` or a bare byte value."""

        value = text.strip().lower()
        if value == EOIKind.FAIL.value:
            return cls.fail()
        if value == EOIKind.EMIT.value:
            return cls.emit()
        if value.startswith("emit:"):
            value = value[len("emit:") :]
        try:
            byte = int(value, 0)
        except ValueError:
            raise ValueError(f"invalid end-of-input policy '{text}'") from None
        return cls.emit(byte)

    def resolve(self) -> int:
        """Return the substitute byte or raise :class:`EndOfInputError`."""

        if self.kind is EOIKind.FAIL:
            raise EndOfInputError("read past end of input")
        return self.byte

    def describe(self) -> str:
        if self.kind is EOIKind.FAIL:
            return "fail"
        return f"emit:{self.byte}"


class ProgramIO:
    """Input source, output sink and end-of-input policy for one run."""

    def __init__(
        self,
        stdin: BinaryIO,
        stdout: BinaryIO,
        eoi: Optional[EOIPolicy] = None,
    ) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.eoi = eoi or EOIPolicy()
        self._exhausted = False

    @classmethod
    def from_bytes(cls, data: bytes = b"", eoi: Optional[EOIPolicy] = None) -> "ProgramIO":
        """Read from ``data`` and collect output in memory (see :meth:`output`)."""

        return cls(io.BytesIO(data), io.BytesIO(), eoi)

    def read_byte(self) -> int:
        """Read one byte, flushing pending output first.

        ``stdin`` must be a blocking stream; a non-blocking reader with no
        data ready raises :class:`BlockingIOError`.
        """

        if not self._exhausted:
            self.stdout.flush()
            chunk = self.stdin.read(1)
            if chunk is None:
                raise BlockingIOError("input stream has no data ready")
            if chunk:
                return chunk[0]
            self._exhausted = True
        return self.eoi.resolve()

    def write_byte(self, value: int) -> None:
        self.stdout.write(bytes((value,)))

    def flush(self) -> None:
        self.stdout.flush()

    def output(self) -> bytes:
        getvalue = getattr(self.stdout, "getvalue", None)
        if getvalue is None:
            raise TypeError("output is only available for in-memory sinks")
        return getvalue()


class CyclingReader(io.RawIOBase):
    """Endless input repeating ``data``; empty ``data`` behaves as empty input."""

    def __init__(self, data: bytes) -> None:
        super().__init__()
        self._source: Iterator[int] = itertools.cycle(data)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        chunk = bytes(itertools.islice(self._source, len(buffer)))
        buffer[: len(chunk)] = chunk
        return len(chunk)


class _ZeroReader(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        buffer[:] = bytes(len(buffer))
        return len(buffer)


class _NullWriter(io.RawIOBase):
    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        return len(data)


def stdio(eoi: Optional[EOIPolicy] = None) -> ProgramIO:
    """Bind the process standard streams."""

    return ProgramIO(sys.stdin.buffer, sys.stdout.buffer, eoi)


def void() -> ProgramIO:
    """Input that always yields zero bytes; output is discarded."""

    return ProgramIO(_ZeroReader(), _NullWriter())


__all__ = [
    "EndOfInputError",
    "EOIKind",
    "EOIPolicy",
    "ProgramIO",
    "CyclingReader",
    "stdio",
    "void",
]
