from pathlib import Path

from pylox.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_runtime_error_stops_execution(capsys):
    with open(EXAMPLES / 'runtime_error.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = run_program(source)
    captured = capsys.readouterr()
    assert captured.out.strip() == 'before'
    assert captured.err.strip() == 'Operands must be numbers.\n[line 2]'
    assert interp.reporter.had_runtime_error
    assert not interp.reporter.had_error


def test_program_resolve_error_runs_nothing(capsys):
    with open(EXAMPLES / 'resolve_error.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = run_program(source)
    captured = capsys.readouterr()
    assert captured.out == ''
    assert interp.reporter.errors == ["[line 2] Error at 'this': Can't use 'this' outside of a class."]
    assert interp.reporter.had_error
