from pathlib import Path

from bfir.ir import IRTextRenderer, Program, parse_program


def test_renderer_indents_loop_bodies():
    program = parse_program(b"+[->+<].")

    text = IRTextRenderer().render(program)

    assert text.splitlines() == [
        "cell 0:+1",
        "loop (1 instructions)",
        "  cell 0:-1 1:+1",
        "write",
    ]


def test_renderer_marks_empty_programs():
    assert IRTextRenderer().render(Program()) == "; (empty)\n"


def test_renderer_can_include_metrics(tmp_path: Path):
    program = parse_program(b",[[-]]")
    output = tmp_path / "out.ir.txt"

    IRTextRenderer(indent=4, include_metrics=True).write(program, output)

    lines = output.read_text("utf-8").splitlines()
    assert lines[0].startswith("; metrics: instructions=2")
    assert lines[1] == "read"
    assert lines[3] == "    loop (1 instructions)"
    assert lines[4] == "        cell 0:-1"


def test_program_render_returns_lines():
    assert parse_program(b">.").render() == ["cell >1", "write"]
