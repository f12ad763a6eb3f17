import sys
from typing import Any, List, Optional, TextIO, Union

from pylox.ast import Token


class LoxRuntimeError(Exception):
    """Exception type used to propagate Lox runtime errors."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ReturnSignal:
    """Result of executing a `return` statement.

    Statement executors hand this back instead of raising it; blocks and
    loops stop at the first one they see and the enclosing call unwraps it.
    """
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class ErrorReporter:
    """Collects diagnostics for one run of the pipeline.

    Static errors (syntax and resolution) set `had_error`; an uncaught
    runtime error sets `had_runtime_error`. Every message is written to the
    error stream and also kept in `errors` so embedders can inspect it.
    """
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.errors: List[str] = []
        self.had_error = False
        self.had_runtime_error = False

    def error(self, where: Union[Token, int], message: str):
        if isinstance(where, Token):
            if where.type == 'EOF':
                self.report(where.line, ' at end', message)
            else:
                self.report(where.line, f" at '{where.lexeme}'", message)
        else:
            self.report(where, '', message)

    def report(self, line: int, where: str, message: str):
        self._emit(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def runtime_error(self, err: LoxRuntimeError):
        self._emit(f"{err.message}\n[line {err.token.line}]")
        self.had_runtime_error = True

    def reset(self):
        self.errors.clear()
        self.had_error = False
        self.had_runtime_error = False

    def _emit(self, text: str):
        self.errors.append(text)
        print(text, file=self.stream if self.stream is not None else sys.stderr)
