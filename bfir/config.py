"""Run configuration shared by the command line drivers and the fixture suite."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .constants import TAPE_LEN
from .optimizer.engine import PassPipeline
from .optimizer.passes import DEFAULT_PIPELINE, get_pass
from .program_io import EOIPolicy

logger = logging.getLogger(__name__)

DEFAULT_PASS_NAMES: Tuple[str, ...] = tuple(pass_.name for pass_ in DEFAULT_PIPELINE)

_KNOWN_KEYS = frozenset({"tape_len", "eoi", "optimize", "passes"})


@dataclass(frozen=True)
class RunConfig:
    """Tape size, end-of-input policy and optimisation settings.

    A JSON configuration file mirrors the field names::

        {"tape_len": 65536, "eoi": "fail", "optimize": true,
         "passes": ["adjacent_merge", "zeroing_loop_reduction", "adjacent_merge"]}

    ``eoi`` accepts anything :meth:`EOIPolicy.parse` understands and ``passes``
    may also be given as a comma separated string.
    """

    tape_len: int = TAPE_LEN
    eoi: EOIPolicy = field(default_factory=EOIPolicy)
    optimize: bool = True
    passes: Tuple[str, ...] = DEFAULT_PASS_NAMES

    def __post_init__(self) -> None:
        if isinstance(self.tape_len, bool) or not isinstance(self.tape_len, int):
            raise ValueError("tape_len must be an integer")
        if self.tape_len <= 0:
            raise ValueError("tape_len must be positive")
        object.__setattr__(self, "passes", tuple(self.passes))
        for name in self.passes:
            get_pass(name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RunConfig":
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            logger.warning("ignoring unknown configuration keys: %s", ", ".join(unknown))

        kwargs: Dict[str, Any] = {}
        if "tape_len" in data:
            kwargs["tape_len"] = data["tape_len"]
        if "eoi" in data:
            kwargs["eoi"] = _parse_eoi(data["eoi"])
        if "optimize" in data:
            value = data["optimize"]
            if not isinstance(value, bool):
                raise ValueError("optimize must be a boolean")
            kwargs["optimize"] = value
        if "passes" in data:
            kwargs["passes"] = parse_pass_names(data["passes"])
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        payload = json.loads(path.read_text("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("configuration file must contain a JSON object")
        return cls.from_mapping(payload)

    def with_overrides(self, **overrides: Any) -> "RunConfig":
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)

    def build_pipeline(self) -> PassPipeline:
        if not self.optimize:
            return PassPipeline(())
        return PassPipeline([get_pass(name) for name in self.passes])

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "tape_len": self.tape_len,
            "eoi": self.eoi.describe(),
            "optimize": self.optimize,
            "passes": list(self.passes),
        }


def parse_pass_names(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(name.strip() for name in value.split(",") if name.strip())
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ValueError("passes must be a list of pass names")


def _parse_eoi(value: Any) -> EOIPolicy:
    if isinstance(value, bool):
        raise ValueError("eoi must be a policy string or a byte value")
    if isinstance(value, int):
        return EOIPolicy.emit(value)
    if isinstance(value, str):
        return EOIPolicy.parse(value)
    raise ValueError("eoi must be a policy string or a byte value")


__all__ = ["DEFAULT_PASS_NAMES", "RunConfig", "parse_pass_names"]
