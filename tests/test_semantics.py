import pytest

from bfir.config import RunConfig
from bfir.interpreter import run_program

PROGRAMS = [
    (b"++++++[>++++++++<-]>+.+.+.", b""),
    (b",[>+<-]>[-]+++.", b"\x05"),
    (b"+++[>+++[>+<-]<-]>>.", b""),
    (b",[.,]", b"optimised"),
    (b"-[--->+<]>.", b""),
    (b"+[-]-[+]+++[->++<]>.", b""),
    (b">>>+++<<<[-]>>>[<<<+>>>-]<<<.", b""),
    (b"+<<<->>>.<<<.", b""),
]


@pytest.mark.parametrize("source, data", PROGRAMS)
def test_optimised_output_matches_unoptimised(source: bytes, data: bytes):
    config = RunConfig(tape_len=64)

    expected = run_program(source, data, config=config, optimize=False)

    assert run_program(source, data, config=config) == expected


@pytest.mark.parametrize(
    "passes",
    [
        ("adjacent_merge",),
        ("zeroing_loop_reduction",),
        ("zeroing_loop_reduction", "adjacent_merge"),
    ],
)
def test_any_pass_order_preserves_output(passes):
    source = b"+++[>++[-]<-]>+.<++[-].>>+[<+>-]<."
    config = RunConfig(tape_len=16, passes=passes)

    expected = run_program(source, config=config, optimize=False)

    assert run_program(source, config=config) == expected
