"""Load and run ``.b`` / ``.in`` / ``.out`` fixture programs.

A fixture directory holds BF programs named ``<case>.b`` next to the output
they must produce, ``<case>.out``.  An optional ``<case>.in`` supplies the
input.  Large inputs can be shared between cases: when the content of an
``.in`` file is the name of another file in the directory, that file's bytes
are used instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import RunConfig
from .interpreter import run_program

logger = logging.getLogger(__name__)

PROGRAM_SUFFIX = ".b"
INPUT_SUFFIX = ".in"
OUTPUT_SUFFIX = ".out"


@dataclass(frozen=True)
class FixtureCase:
    name: str
    program: bytes
    input: bytes
    expected: bytes

    def run(self, config: Optional[RunConfig] = None) -> "FixtureResult":
        output = run_program(self.program, self.input, config=config)
        return FixtureResult(case=self, output=output)


@dataclass(frozen=True)
class FixtureResult:
    case: FixtureCase
    output: bytes

    @property
    def passed(self) -> bool:
        return self.output == self.case.expected

    def describe(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        line = f"{status} {self.case.name}"
        if not self.passed:
            line += f" expected={self.case.expected!r} actual={self.output!r}"
        return line


def load_case(program_path: Path) -> FixtureCase:
    """Build a case from ``program_path`` and its sibling files."""

    expected_path = program_path.with_suffix(OUTPUT_SUFFIX)
    if not expected_path.exists():
        raise ValueError(f"missing expected output for {program_path.name}")
    return FixtureCase(
        name=program_path.stem,
        program=program_path.read_bytes(),
        input=_resolve_input(program_path.with_suffix(INPUT_SUFFIX)),
        expected=expected_path.read_bytes(),
    )


def discover(directory: Path) -> List[FixtureCase]:
    """Return every complete fixture case in ``directory`` sorted by name."""

    if not directory.is_dir():
        raise ValueError(f"fixture directory not found: {directory}")
    cases: List[FixtureCase] = []
    for program_path in sorted(directory.glob(f"*{PROGRAM_SUFFIX}")):
        if not program_path.with_suffix(OUTPUT_SUFFIX).exists():
            logger.debug("skipping %s: no expected output", program_path.name)
            continue
        cases.append(load_case(program_path))
    return cases


def run_suite(
    cases: Sequence[FixtureCase], config: Optional[RunConfig] = None
) -> List[FixtureResult]:
    results: List[FixtureResult] = []
    for case in cases:
        logger.info("running fixture %s", case.name)
        result = case.run(config)
        if not result.passed:
            logger.info("fixture %s produced unexpected output", case.name)
        results.append(result)
    return results


def _resolve_input(input_path: Path) -> bytes:
    if not input_path.exists():
        return b""
    raw = input_path.read_bytes()
    referenced = _referenced_file(input_path.parent, raw)
    if referenced is not None:
        logger.debug("input of %s redirected to %s", input_path.name, referenced.name)
        return referenced.read_bytes()
    return raw


def _referenced_file(root: Path, raw: bytes) -> Optional[Path]:
    name = raw.decode("utf-8", "replace").strip()
    if not name or "\n" in name or "\x00" in name:
        return None
    candidate = root / name
    try:
        if candidate.is_file():
            return candidate
    except OSError:
        return None
    return None


__all__ = [
    "FixtureCase",
    "FixtureResult",
    "load_case",
    "discover",
    "run_suite",
]
