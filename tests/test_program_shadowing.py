from pathlib import Path

from pylox.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_shadowing(capsys):
    with open(EXAMPLES / 'shadowing.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    # A closure keeps the binding it saw when it was resolved, even after a
    # later declaration in the same block shadows the name.
    assert out == ['changed', 'outer', 'global', 'global', 'block']
