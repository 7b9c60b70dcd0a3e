import io

from bfir.parser import RawLoop, RawOp, RawScope, parse


def test_parse_ignores_comment_characters() -> None:
    scope = parse(b"hello + world - > <")

    assert list(scope) == [RawOp.INC, RawOp.DEC, RawOp.RIGHT, RawOp.LEFT]


def test_parse_builds_nested_loops() -> None:
    scope = parse("+[>[-]<.]")

    assert len(scope) == 2
    loop = scope[1]
    assert isinstance(loop, RawLoop)
    assert loop.body[0] is RawOp.RIGHT
    inner = loop.body[1]
    assert isinstance(inner, RawLoop)
    assert list(inner.body) == [RawOp.DEC]
    assert scope.to_source() == b"+[>[-]<.]"


def test_unmatched_close_ends_the_top_level_scope() -> None:
    scope = parse(b"+.]+++")

    assert list(scope) == [RawOp.INC, RawOp.WRITE]


def test_unclosed_loops_are_closed_at_end_of_input() -> None:
    scope = parse(b"+[-[>")

    assert scope.to_source() == b"+[-[>]]"


def test_parse_accepts_streams() -> None:
    stream = io.BytesIO(b",[.,]" * 3)

    scope = parse(stream)

    assert scope.to_source() == b",[.,]" * 3


def test_empty_source_yields_empty_scope() -> None:
    assert parse(b"") == RawScope()
    assert parse(b"no commands here").to_source() == b""


def test_deep_nesting_does_not_exhaust_the_stack() -> None:
    depth = 20000
    source = b"[" * depth + b"+" + b"]" * depth

    scope = parse(source)

    assert scope.to_source() == source
