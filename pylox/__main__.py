"""CLI entry point for the Lox interpreter.

Usage:
    python -m pylox [-v|-vv|-vvv] [script]
    python -m pylox [-v...] --emit-ast <script>
    python -m pylox [-v...] --ast <ast_json_file>
    python -m pylox --print-ast <script>
    python -m pylox --tokens <script>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --print-ast   Print the parsed program as S-expressions
  --tokens      Print the token stream of the given file

Without a script the interpreter starts an interactive prompt; globals
persist from one line to the next. Debug information is written to
`debug.txt` in the current directory when verbosity is greater than zero.

Exit codes follow the sysexits convention: 64 usage error, 65 syntax or
resolution error, 66 missing input file, 70 uncaught runtime error.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_from_obj, ast_to_obj
from .ast_printer import AstPrinter
from .errors import ErrorReporter
from .interpreter import Interpreter, run_program, run_statements
from .parser import parse_program, tokenize

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


def read_source(path_arg: str) -> str:
    path = Path(path_arg)
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EX_NOINPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def exit_for(reporter: ErrorReporter):
    if reporter.had_error:
        sys.exit(EX_DATAERR)
    if reporter.had_runtime_error:
        sys.exit(EX_SOFTWARE)


def run_prompt(interpreter: Interpreter):
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            break
        # Errors are reported and reset per line; the session keeps going.
        run_program(line, interpreter)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='pylox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--print-ast', metavar='LOX_FILE', help='print the AST of the given .lox file')
    group.add_argument('--tokens', metavar='LOX_FILE', help='print the tokens of the given .lox file')
    parser.add_argument('script', nargs='?', help='Lox script (.lox) to execute')
    args, extra = parser.parse_known_args(argv)
    if extra:
        print("Usage: pylox [script]", file=sys.stderr)
        sys.exit(EX_USAGE)

    # Token dump mode
    if args.tokens:
        reporter = ErrorReporter()
        for token in tokenize(read_source(args.tokens), reporter):
            print(f"{token.line}:{token.column} {token.type} {token.lexeme!r}")
        exit_for(reporter)
        return

    # AST printing mode
    if args.print_ast:
        reporter = ErrorReporter()
        statements = parse_program(read_source(args.print_ast), reporter)
        if statements is None:
            sys.exit(EX_DATAERR)
        print(AstPrinter().print(statements))
        return

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        reporter = ErrorReporter()
        statements = parse_program(read_source(args.emit_ast), reporter)
        if statements is None:
            sys.exit(EX_DATAERR)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(statements), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(debug_level=args.v)
    try:
        # Execute from AST JSON
        if args.ast:
            data = json.loads(read_source(args.ast))
            run_statements(ast_from_obj(data), interpreter)
            exit_for(interpreter.reporter)
            return

        if not args.script:
            run_prompt(interpreter)
            return

        run_program(read_source(args.script), interpreter)
        exit_for(interpreter.reporter)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
