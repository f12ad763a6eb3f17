import builtins
from pathlib import Path

import pytest

from pylox.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def write(tmp_path, name, source):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)


def test_run_script(capsys):
    main([str(EXAMPLES / 'factorial.lox')])
    assert capsys.readouterr().out.strip() == '3628800'


def test_runtime_error_exit_code(capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(EXAMPLES / 'runtime_error.lox')])
    assert exc.value.code == 70
    captured = capsys.readouterr()
    assert captured.out.strip() == 'before'
    assert 'Operands must be numbers.' in captured.err


def test_static_error_exit_code(capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(EXAMPLES / 'resolve_error.lox')])
    assert exc.value.code == 65
    assert capsys.readouterr().out == ''


def test_syntax_error_exit_code(tmp_path, capsys):
    script = write(tmp_path, 'broken.lox', 'print (1;')
    with pytest.raises(SystemExit) as exc:
        main([script])
    assert exc.value.code == 65
    assert '[line 1] Error' in capsys.readouterr().err


def test_missing_file_exit_code(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.lox')])
    assert exc.value.code == 66


def test_too_many_arguments_exit_code(capsys):
    with pytest.raises(SystemExit) as exc:
        main(['one.lox', 'two.lox'])
    assert exc.value.code == 64
    assert 'Usage: pylox [script]' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    script = write(tmp_path, 'cake.lox', (EXAMPLES / 'cake.lox').read_text(encoding='utf-8'))
    main(['--emit-ast', script])
    ast_path = capsys.readouterr().out.strip()
    assert ast_path == script + '.ast.json'
    assert Path(ast_path).exists()

    main(['--ast', ast_path])
    assert capsys.readouterr().out.strip() == 'Tastes like chocolate'


def test_print_ast(tmp_path, capsys):
    script = write(tmp_path, 'small.lox', 'var a = 1;\nprint a + 2;')
    main(['--print-ast', script])
    assert capsys.readouterr().out.strip().splitlines() == ['(var a 1)', '(print (+ a 2))']


def test_tokens(tmp_path, capsys):
    script = write(tmp_path, 'small.lox', 'print 1;')
    main(['--tokens', script])
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "1:1 PRINT 'print'"
    assert lines[-1].endswith("EOF ''")


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-vv', str(EXAMPLES / 'counter.lox')])
    assert capsys.readouterr().out.strip().splitlines() == ['1', '2', '1', '3']
    text = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'define function makeCounter' in text
    assert "resolve 'count' at distance 1" in text


def test_repl_keeps_state_between_lines(monkeypatch, capsys):
    lines = iter([
        'var a = 1;',
        'print a + 1;',
        'print b;',
        'fun inc() { a = a + 1; }',
        'inc();',
        'print a;',
    ])

    def fake_input(prompt=''):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, 'input', fake_input)
    main([])
    captured = capsys.readouterr()
    assert captured.out.strip().splitlines() == ['2', '2']
    assert "Undefined variable 'b'." in captured.err


def test_stack_overflow_exit_code(tmp_path, capsys):
    script = write(tmp_path, 'forever.lox', 'fun loop() { loop(); }\nloop();')
    with pytest.raises(SystemExit) as exc:
        main([script])
    assert exc.value.code == 70
    assert 'Stack overflow.' in capsys.readouterr().err
