"""Peephole optimisation passes and the engine that applies them."""

from .engine import PassContractError, PassPipeline, PassReport, apply_pass, optimize
from .passes import (
    ADJACENT_MERGE,
    DEFAULT_PIPELINE,
    PASSES,
    ZEROING_LOOP_REDUCTION,
    PassKind,
    PeepholePass,
    Replace,
    get_pass,
    terminates_by_addition,
)

__all__ = [
    "PassContractError",
    "PassPipeline",
    "PassReport",
    "apply_pass",
    "optimize",
    "ADJACENT_MERGE",
    "ZEROING_LOOP_REDUCTION",
    "DEFAULT_PIPELINE",
    "PASSES",
    "PassKind",
    "PeepholePass",
    "Replace",
    "get_pass",
    "terminates_by_addition",
]
