"""Runtime object model for Lox.

This module defines the values the interpreter manipulates beyond the
Python primitives it reuses directly (``None`` for nil, ``bool``, ``float``
and ``str``): callables, user functions and bound methods, classes and
instances. It also provides `to_string`, the canonical rendering used by
``print``.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from pylox.ast import FunctionDecl, Token
from pylox.environment import Environment
from pylox.errors import LoxRuntimeError, ReturnSignal

if TYPE_CHECKING:
    from pylox.interpreter import Interpreter


class LoxCallable:
    """Anything that can appear in callee position.

    Implementations report a fixed `arity`; the interpreter checks the
    argument count against it before `call` runs.
    """
    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        raise NotImplementedError


class LoxFunction(LoxCallable):
    """A user-defined function or method together with its closure.

    The closure is the environment that was current when the declaration
    executed. It is shared, never copied, so later assignments to captured
    variables are visible to the function.
    """
    def __init__(self, declaration: FunctionDecl, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        environment = Environment(self.closure)
        environment.define('this', instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, arg)
        result = interpreter.execute_block(self.declaration.body, environment)
        # Initializers always hand back the instance, even on a bare `return;`.
        if self.is_initializer:
            return self.closure.get_at(0, 'this')
        if isinstance(result, ReturnSignal):
            return result.value
        return None

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    """A class: a name, an optional superclass and its unbound methods."""
    def __init__(self, name: str, superclass: Optional['LoxClass'], methods: Dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def arity(self) -> int:
        initializer = self.find_method('init')
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method('init')
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __repr__(self) -> str:
        return self.name


class LoxInstance:
    """An instance of a `LoxClass` with its own mutable field table."""
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"


def is_number(value: Any) -> bool:
    # bool is a subclass of int, never of float, so this excludes booleans
    return isinstance(value, float)


def format_number(value: float) -> str:
    """Render a finite float in the canonical Lox number format.

    Magnitudes in [1e-3, 1e7) use plain decimal notation (``2.5``,
    ``100.0``); everything else uses ``<d>.<digits>E<exp>`` (``1.0E20``,
    ``1.5E-5``). Both use the shortest digits that round-trip, which is
    what ``repr`` produces.
    """
    magnitude = abs(value)
    if magnitude == 0.0 or 1e-3 <= magnitude < 1e7:
        return repr(value)
    _, digits, exponent = Decimal(repr(magnitude)).as_tuple()
    scientific_exp = len(digits) + exponent - 1
    mantissa = ''.join(str(d) for d in digits).rstrip('0') or '0'
    text = f"{mantissa[0]}.{mantissa[1:] or '0'}E{scientific_exp}"
    return '-' + text if value < 0 else text


def to_string(value: Any) -> str:
    """Convert a Lox value to the text ``print`` writes for it."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return 'Infinity' if value > 0 else '-Infinity'
        text = format_number(value)
        if text.endswith('.0'):
            text = text[:-2]
        return text
    if isinstance(value, str):
        return value
    return repr(value)
