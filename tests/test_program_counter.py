from pathlib import Path

from pylox.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_counter_closures_are_independent(capsys):
    with open(EXAMPLES / 'counter.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['1', '2', '1', '3']
