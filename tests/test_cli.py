import json
import logging
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from whilelang import while_cli
from whilelang.while_ast import Assignment, Integer, Skip
from whilelang.while_lexer import LexicalError
from whilelang.while_parser import ParseError

PROGRAM = "assume n := 3\nx := 0;\nwhile x < n do x := x + 1"


def test_run_while_string_prints_repr(capsys: pytest.CaptureFixture[str]) -> None:
    ast = while_cli.run_while("x := 5", is_string=True)
    assert ast == Assignment("x", Integer(5))
    out = capsys.readouterr().out.strip()
    assert out == repr(Assignment("x", Integer(5)))


def test_run_while_json(capsys: pytest.CaptureFixture[str]) -> None:
    while_cli.run_while("skip", is_string=True, as_json=True)
    out = capsys.readouterr().out
    assert json.loads(out) == {"kind": "skip", "children": []}


def test_run_while_file(tmp_path: Path) -> None:
    src_file = tmp_path / "prog.while"
    src_file.write_text("skip", encoding="utf-8")
    assert while_cli.run_while(str(src_file)) == Skip()


def test_run_while_rejects_other_extensions() -> None:
    with pytest.raises(ValueError, match="Only .while files are supported."):
        while_cli.run_while("prog.txt")


def test_run_while_start_rule(capsys: pytest.CaptureFixture[str]) -> None:
    ast = while_cli.run_while("- 5", is_string=True, start="term")
    assert ast == Integer(-5)


def test_run_while_show_vars(capsys: pytest.CaptureFixture[str]) -> None:
    while_cli.run_while(PROGRAM, is_string=True, show_vars=True)
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[-3] == "variables: n, x"
    assert lines[-2] == "constants: 0, 1"
    assert lines[-1] == "assume: n := 3"


def test_run_while_propagates_parse_error() -> None:
    with pytest.raises(ParseError):
        while_cli.run_while("if true then", is_string=True)


def test_run_while_propagates_lexical_error() -> None:
    with pytest.raises(LexicalError):
        while_cli.run_while("x := @", is_string=True)


def test_main_parses_string(capsys: pytest.CaptureFixture[str]) -> None:
    while_cli.main(["-s", "skip ; skip"])
    assert "Composition" in capsys.readouterr().out


def test_main_parses_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src_file = tmp_path / "loop.while"
    src_file.write_text(PROGRAM, encoding="utf-8")
    while_cli.main([str(src_file), "--json"])
    tree = json.loads(capsys.readouterr().out)
    assert tree["kind"] == "seq"
    assert tree["children"][1]["kind"] == "while"
    assert tree["children"][1]["line"] == 3


def test_main_syntax_error_exits_1(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        while_cli.main(["-s", "if true then"])
    assert e.value.code == 1
    assert "error: Unexpected end of input" in capsys.readouterr().err


def test_main_lexical_error_exits_1(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        while_cli.main(["-s", "x := 1 $"])
    assert e.value.code == 1
    assert "InvalidToken" in capsys.readouterr().err


def test_main_deep_nesting_exits_1(capsys: pytest.CaptureFixture[str]) -> None:
    depth = 10_000
    with pytest.raises(SystemExit) as e:
        while_cli.main(["-s", "x := " + "(" * depth + "1" + ")" * depth])
    assert e.value.code == 1
    assert "error: Nesting too deep" in capsys.readouterr().err


def test_main_missing_file_exits_1(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as e:
        while_cli.main([str(tmp_path / "missing.while")])
    assert e.value.code == 1
    assert capsys.readouterr().err.startswith("error:")


def test_main_invalid_start() -> None:
    with pytest.raises(SystemExit) as e:
        while_cli.main(["-s", "skip", "--start", "program"])
    assert e.value.code == 2


def test_main_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(
        logging, "basicConfig", lambda **kwargs: calls.append(kwargs["level"])
    )
    while_cli.main(["-s", "skip", "--log-level", "DEBUG"])
    assert calls == [logging.DEBUG]


def test_main_calls_repl_on_no_args(monkeypatch: pytest.MonkeyPatch) -> None:
    called: list[bool] = []
    monkeypatch.setattr(
        "whilelang.while_repl.start_repl", lambda *a, **k: called.append(True)
    )
    while_cli.main([])
    assert called == [True]


def test_main_repl_flag_calls_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}
    monkeypatch.setattr(
        "whilelang.while_repl.start_repl", lambda **k: seen.update(k)
    )
    while_cli.main(["--repl", "--start", "boolean_exp", "--json"])
    assert seen == {"start": "boolean_exp", "as_json": True}


def test_main_reads_sys_argv(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.argv", ["whilelang", "-s", "skip"])
    while_cli.main()
    assert capsys.readouterr().out.strip() == repr(Skip())


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(source=st.text(alphabet="xy01 :=;+-*/<&!(){}", max_size=30))  # type: ignore[misc]
def test_main_never_crashes_on_random_input(
    source: str, capsys: pytest.CaptureFixture[str]
) -> None:
    try:
        while_cli.main(["-s", "--", source])
    except SystemExit as e:
        assert e.code == 1
    capsys.readouterr()
