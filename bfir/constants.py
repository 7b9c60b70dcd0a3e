"""Machine constants shared by the parser, optimiser and interpreter."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Tape geometry
# ---------------------------------------------------------------------------

# Number of cells on the ring shaped tape.  Pointer arithmetic wraps modulo
# this value so every access stays in bounds.
TAPE_LEN = 1024 * 1024

# Cells hold unsigned bytes and wrap modulo 256.
CELL_MODULUS = 256
CELL_MASK = CELL_MODULUS - 1


# ---------------------------------------------------------------------------
# Source alphabet
# ---------------------------------------------------------------------------

INC = ord("+")
DEC = ord("-")
RIGHT = ord(">")
LEFT = ord("<")
READ = ord(",")
WRITE = ord(".")
LOOP_OPEN = ord("[")
LOOP_CLOSE = ord("]")


def wrap_cell(value: int) -> int:
    """Return ``value`` reduced to an unsigned cell value."""

    return value & CELL_MASK


def wrap_delta(value: int) -> int:
    """Return ``value`` reduced to a wrapping signed byte in ``[-128, 127]``."""

    return ((value + 128) & CELL_MASK) - 128


__all__ = [
    "TAPE_LEN",
    "CELL_MODULUS",
    "CELL_MASK",
    "INC",
    "DEC",
    "RIGHT",
    "LEFT",
    "READ",
    "WRITE",
    "LOOP_OPEN",
    "LOOP_CLOSE",
    "wrap_cell",
    "wrap_delta",
]
