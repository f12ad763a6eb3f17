# Lox language package
# This package provides a resolver and tree-walking interpreter for Lox.
from .errors import ErrorReporter, LoxRuntimeError
from .interpreter import Interpreter, run_file, run_program, run_statements
from .parser import parse_program, tokenize
from .resolver import Resolver

__all__ = [
    'ErrorReporter',
    'Interpreter',
    'LoxRuntimeError',
    'Resolver',
    'parse_program',
    'run_file',
    'run_program',
    'run_statements',
    'tokenize',
]
