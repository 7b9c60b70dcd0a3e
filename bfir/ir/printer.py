"""Render programs into an indented, human readable listing."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Tuple

from .model import Loop, Program, ProgramMetrics


class IRTextRenderer:
    """Render :class:`Program` instances for debugging.

    One instruction per line, loop bodies indented below their ``loop``
    header.  The format is not stable and cannot be parsed back.
    """

    def __init__(self, indent: int = 2, *, include_metrics: bool = False) -> None:
        self.indent = indent
        self.include_metrics = include_metrics

    def render(self, program: Program) -> str:
        return "\n".join(self.render_lines(program)) + "\n"

    def write(self, program: Program, output_path: Path) -> None:
        output_path.write_text(self.render(program), "utf-8")

    def render_lines(self, program: Program) -> List[str]:
        lines: List[str] = []
        if self.include_metrics:
            lines.append("; metrics: " + ProgramMetrics.of(program).describe())
        if not len(program):
            lines.append("; (empty)")
            return lines
        lines.extend(self._render_scope(program))
        return lines

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _render_scope(self, program: Program) -> Iterator[str]:
        stack: List[Tuple[Iterator, int]] = [(iter(program), 0)]
        while stack:
            items, depth = stack[-1]
            instruction = next(items, None)
            if instruction is None:
                stack.pop()
                continue
            pad = " " * (self.indent * depth)
            yield f"{pad}{instruction.describe()}"
            if isinstance(instruction, Loop):
                stack.append((iter(instruction.body), depth + 1))


__all__ = ["IRTextRenderer"]
