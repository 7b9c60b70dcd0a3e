from pathlib import Path

import pytest

from bfir.config import RunConfig
from bfir.fixtures import FixtureCase, discover, load_case, run_suite

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def test_bundled_fixtures_pass() -> None:
    cases = discover(FIXTURES)

    assert [case.name for case in cases] == ["echo", "greeting", "shared"]
    results = run_suite(cases)
    assert all(result.passed for result in results)


def test_bundled_fixtures_pass_without_optimisation() -> None:
    results = run_suite(discover(FIXTURES), RunConfig(optimize=False))

    assert all(result.passed for result in results)


def test_input_file_can_reference_another_file(tmp_path: Path) -> None:
    (tmp_path / "data.bin").write_bytes(b"xyz")
    (tmp_path / "copy.b").write_bytes(b",[.,]")
    (tmp_path / "copy.in").write_text("data.bin\n", "utf-8")
    (tmp_path / "copy.out").write_bytes(b"xyz")

    case = load_case(tmp_path / "copy.b")

    assert case.input == b"xyz"
    assert case.run().passed


def test_literal_input_is_used_as_is(tmp_path: Path) -> None:
    (tmp_path / "echo.b").write_bytes(b",[.,]")
    (tmp_path / "echo.in").write_bytes(b"missing.bin")
    (tmp_path / "echo.out").write_bytes(b"missing.bin")

    (case,) = discover(tmp_path)

    assert case.input == b"missing.bin"


def test_programs_without_expected_output_are_skipped(tmp_path: Path) -> None:
    (tmp_path / "draft.b").write_bytes(b"+.")

    assert discover(tmp_path) == []
    with pytest.raises(ValueError, match="missing expected output"):
        load_case(tmp_path / "draft.b")


def test_failing_case_is_described() -> None:
    case = FixtureCase(name="wrong", program=b"+.", input=b"", expected=b"\x02")

    result = case.run()

    assert not result.passed
    assert result.describe().startswith("FAIL wrong")
    assert "actual=b'\\x01'" in result.describe()


def test_missing_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        discover(tmp_path / "nowhere")
