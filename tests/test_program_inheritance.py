from pathlib import Path

from pylox.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_inheritance(capsys):
    with open(EXAMPLES / 'inheritance.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['Woof', '...', 'I say Woof', '...', 'Woof', '...']
