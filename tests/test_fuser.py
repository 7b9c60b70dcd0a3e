from bfir.ir import (
    Add,
    CellOp,
    CellOpBuilder,
    Loop,
    Program,
    READ,
    SetAbs,
    WRITE,
    parse_program,
)
from bfir.parser import parse
from bfir.ir.fuser import fuse


def test_straight_line_run_becomes_one_node():
    program = parse_program(b"+++>-->+<<")

    assert program == Program((CellOp({0: Add(3), 1: Add(-2), 2: Add(1)}, 0),))


def test_offsets_are_relative_to_the_start_of_the_run():
    program = parse_program(b">>+<<<-")

    assert program[0] == CellOp({2: Add(1), -1: Add(-1)}, -1)


def test_io_and_loops_end_a_run():
    program = parse_program(b"+.>,[-]+")

    assert program.instructions == (
        CellOp({0: Add(1)}, 0),
        WRITE,
        CellOp({}, 1),
        READ,
        Loop(Program((CellOp({0: Add(-1)}, 0),))),
        CellOp({0: Add(1)}, 0),
    )


def test_cancelling_runs_produce_no_instruction():
    assert len(parse_program(b"><")) == 0
    assert len(parse_program(b"+-")) == 0
    assert parse_program(b".><.").instructions == (WRITE, WRITE)


def test_empty_loop_body_is_kept():
    program = parse_program(b"[]")

    assert program.instructions == (Loop(Program()),)


def test_builder_composes_repeated_offsets():
    builder = CellOpBuilder()
    builder.add(1)
    builder.move(1)
    builder.add(-1)
    builder.move(-1)
    builder.add(2)

    node = builder.flush()

    assert node == CellOp({0: Add(3), 1: Add(-1)}, 0)
    assert builder.flush() is None


def test_fused_cell_op_never_holds_set_from_source():
    program = fuse(parse(b"+" * 300 + b">" * 5))

    node = program[0]
    assert node.get(0) == Add(300)
    assert not isinstance(node.get(0), SetAbs)
    assert node.ptr_shift == 5
