import json
import logging
from pathlib import Path

import pytest

from bfir.config import DEFAULT_PASS_NAMES, RunConfig, parse_pass_names
from bfir.constants import TAPE_LEN
from bfir.program_io import EOIKind, EOIPolicy


def test_defaults():
    config = RunConfig()

    assert config.tape_len == TAPE_LEN
    assert config.eoi == EOIPolicy.emit(0)
    assert config.optimize
    assert config.passes == DEFAULT_PASS_NAMES
    assert [p.name for p in config.build_pipeline().passes] == list(DEFAULT_PASS_NAMES)


def test_load_from_json(tmp_path: Path) -> None:
    path = tmp_path / "run.json"
    path.write_text(
        json.dumps({"tape_len": 16, "eoi": "fail", "passes": "adjacent_merge"}), "utf-8"
    )

    config = RunConfig.load(path)

    assert config.tape_len == 16
    assert config.eoi.kind is EOIKind.FAIL
    assert config.passes == ("adjacent_merge",)
    assert config.to_mapping()["eoi"] == "fail"


def test_unknown_keys_are_logged(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="bfir.config"):
        config = RunConfig.from_mapping({"tape_len": 8, "colour": "blue"})

    assert config.tape_len == 8
    assert "colour" in caplog.text


@pytest.mark.parametrize(
    "payload",
    [
        {"tape_len": 0},
        {"tape_len": "big"},
        {"tape_len": True},
        {"optimize": "yes"},
        {"passes": ["loop_unrolling"]},
        {"passes": 3},
        {"eoi": "sometimes"},
        {"eoi": 256},
    ],
)
def test_invalid_values_raise(payload):
    with pytest.raises(ValueError):
        RunConfig.from_mapping(payload)


def test_load_requires_an_object(tmp_path: Path) -> None:
    path = tmp_path / "run.json"
    path.write_text("[1, 2]", "utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        RunConfig.load(path)


def test_overrides_skip_none_values() -> None:
    config = RunConfig(tape_len=32)

    assert config.with_overrides(tape_len=None, optimize=None) is config
    updated = config.with_overrides(optimize=False)
    assert not updated.optimize
    assert updated.tape_len == 32
    assert updated.build_pipeline().passes == ()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("fail", EOIPolicy.fail()),
        ("emit", EOIPolicy.emit(0)),
        ("emit:255", EOIPolicy.emit(255)),
        ("0x0a", EOIPolicy.emit(10)),
        (" EMIT:7 ", EOIPolicy.emit(7)),
    ],
)
def test_eoi_policy_parse(text: str, expected: EOIPolicy):
    assert EOIPolicy.parse(text) == expected


def test_parse_pass_names() -> None:
    assert parse_pass_names(" adjacent_merge , zeroing_loop_reduction ") == (
        "adjacent_merge",
        "zeroing_loop_reduction",
    )
    assert parse_pass_names("") == ()
