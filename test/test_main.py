# test/test_main.py
import json

import pytest

import main as cli

HELLO = """
FUN main(): Integer DO
    print("hello");
    RETURN 3;
END
"""


@pytest.fixture
def program(tmp_path):
    def write(text, name="prog.plc"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)

    return write


def run_cli(*argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(list(argv))
    return excinfo.value.code


# ---------- RUN ----------


def test_run_prints_and_exits_with_main_result(program, capsys):
    code = run_cli(program(HELLO), "-q")

    captured = capsys.readouterr()
    assert code == 3
    assert captured.out == "hello\n"
    assert captured.err == ""


def test_run_reports_result_unless_quiet(program, capsys):
    run_cli(program(HELLO), "--no-color")

    assert "main() returned 3" in capsys.readouterr().err


def test_check_only_analyzes(program, capsys):
    code = run_cli(program(HELLO), "--check")

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == ""
    assert "no errors" in captured.err


def test_ast_prints_json(program, capsys):
    code = run_cli(program(HELLO), "--ast")

    tree = json.loads(capsys.readouterr().out)
    assert code == 0
    assert tree["__class__"] == "Source"
    assert tree["functions"][0]["name"] == "main"


# ---------- ERRORS ----------


def test_missing_file(tmp_path, capsys):
    code = run_cli(str(tmp_path / "nope.plc"))

    assert code == 1
    assert "file not found" in capsys.readouterr().err


def test_parse_error(program, capsys):
    code = run_cli(program("FUN main( DO END"))

    assert code == 1
    assert "parse error" in capsys.readouterr().err


def test_semantic_error(program, capsys):
    code = run_cli(program("FUN main(): Integer DO RETURN TRUE; END"))

    err = capsys.readouterr().err
    assert code == 1
    assert "semantic error" in err
    assert "Expected type 'Integer', received 'Boolean'" in err


def test_runtime_error(program, capsys):
    code = run_cli(program("FUN main(): Integer DO RETURN 1 / 0; END"), "-q")

    err = capsys.readouterr().err
    assert code == 1
    assert "runtime error" in err
    assert "Division by zero" in err


def test_warns_on_unexpected_extension(program, capsys):
    run_cli(program(HELLO, name="prog.txt"), "-q")

    assert "does not have .plc extension" in capsys.readouterr().err


def test_version(capsys):
    code = run_cli("--version")

    assert code == 0
    assert cli.VERSION in capsys.readouterr().out


def test_help_lists_options(capsys):
    code = run_cli("--help")

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith(f"plc {cli.VERSION}")
    for option in ("--check", "--ast", "--no-color", "--quiet"):
        assert option in out


def test_cli_shares_the_compiled_parser():
    from plc import PlcParser

    assert cli.parser is PlcParser.parser
