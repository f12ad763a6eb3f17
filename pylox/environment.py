from typing import Any, Dict, Optional

from pylox.ast import Token
from pylox.errors import LoxRuntimeError


class Environment:
    """Represents one lexical scope mapping names to values.

    Frames chain to their enclosing frame. A frame is shared by every closure
    created while it was innermost, so it lives as long as any of them does.
    """
    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        # Redefinition in the same frame is legal at runtime (globals, REPL).
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> 'Environment':
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self) -> str:
        names = ', '.join(self.values)
        return f"<env [{names}]>" if self.enclosing is None else f"<env [{names}] -> {self.enclosing!r}>"
