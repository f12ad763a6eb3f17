from pathlib import Path

from pylox.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_cake(capsys):
    with open(EXAMPLES / 'cake.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = run_program(source)
    out = capsys.readouterr().out.strip()
    assert out == 'Tastes like chocolate'
    assert not interp.reporter.had_error
    assert not interp.reporter.had_runtime_error
