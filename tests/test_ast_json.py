import json
from pathlib import Path

import pytest

from pylox.ast import Literal
from pylox.ast_json import ast_from_obj, ast_to_obj
from pylox.ast_printer import AstPrinter
from pylox.interpreter import Interpreter, run_statements
from pylox.parser import parse_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_ast_json_round_trip_runs(capsys):
    with open(EXAMPLES / 'inheritance.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    statements = parse_program(source)
    text = json.dumps(ast_to_obj(statements))
    loaded = ast_from_obj(json.loads(text))

    assert AstPrinter().print(loaded) == AstPrinter().print(statements)
    run_statements(loaded, Interpreter())
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['Woof', '...', 'I say Woof', '...', 'Woof', '...']


def test_tokens_keep_positions():
    statements = parse_program('var a = 1;\nprint a;')
    obj = ast_to_obj(statements)
    assert obj[1]['type'] == 'PrintStmt'
    assert obj[1]['value']['name']['line'] == 2
    assert obj[1]['value']['name']['lexeme'] == 'a'


def test_integer_literals_load_as_numbers():
    node = ast_from_obj({'type': 'Literal', 'value': 3})
    assert isinstance(node, Literal)
    assert node.value == 3.0
    assert isinstance(node.value, float)
    assert ast_from_obj({'type': 'Literal', 'value': True}).value is True


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Bogus'})
    with pytest.raises(TypeError):
        ast_to_obj(object())
