"""Interpreter for the Lox language.

This module implements the evaluation half of the pipeline: it walks the
AST produced by `pylox.parser`, using the distance table computed by
`pylox.resolver` to reach local variables in exactly the frame that
declared them. Globals are looked up by name.

Statement execution returns either None (the statement completed) or a
`ReturnSignal` carrying the value of a ``return``; blocks, loops and ``if``
stop at the first signal and hand it up to the enclosing function call.
Runtime errors are raised as `LoxRuntimeError` and caught only at the top
of `Interpreter.interpret`, which reports the error and stops the run.
"""

from __future__ import annotations

import math
import sys
from typing import Any, Dict, List, Optional, TextIO

from .ast import (
    Token, Stmt, Expr, Block, ClassDecl, ExprStmt, FunctionDecl, IfStmt,
    PrintStmt, ReturnStmt, VarDecl, WhileStmt, Assign, Binary, Call, Get,
    Grouping, Literal, Logical, Set, Super, This, Unary, Variable,
)
from .builtin_function import NATIVES
from .environment import Environment
from .errors import ErrorReporter, LoxRuntimeError, ReturnSignal
from .parser import parse_program
from .resolver import Resolver
from .types import (
    LoxCallable, LoxClass, LoxFunction, LoxInstance, is_number, to_string,
)

# Every Lox call nests several Python frames (evaluate -> evaluate_call ->
# LoxFunction.call -> execute_block -> execute -> evaluate ...).
RECURSION_LIMIT = 10000


class Interpreter:
    """Core interpreter that executes Lox AST."""
    def __init__(self, reporter: Optional[ErrorReporter] = None, output: Optional[TextIO] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.output = output
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[Expr, int] = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        for native in NATIVES:
            self.globals.define(native.name, native)
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API

    def interpret(self, statements: List[Stmt], locals: Optional[Dict[Expr, int]] = None) -> bool:
        """Execute a resolved program.

        `locals` is the table returned by `Resolver.resolve` for these
        statements. References missing from it are treated as globals.
        Returns False if a runtime error stopped the run. The error has
        already been reported through the reporter by then.
        """
        if locals:
            self.locals.update(locals)
        if self.debug_level >= 1:
            self.debug(f"run {len(statements)} statement(s)")
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as err:
            if self.debug_level >= 1:
                self.debug(f"runtime error at line {err.token.line}: {err.message}")
            self.reporter.runtime_error(err)
            return False
        return True

    # Statements

    def execute_block(self, statements: List[Stmt], environment: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                result = self.execute(stmt)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        finally:
            self.environment = previous

    def execute(self, node: Stmt) -> Optional[ReturnSignal]:
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr)
            return None
        if isinstance(node, PrintStmt):
            value = self.evaluate(node.value)
            print(to_string(value), file=self.output if self.output is not None else sys.stdout)
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.initializer) if node.initializer is not None else None
            self.environment.define(node.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name.lexeme} = {to_string(value)}")
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, Environment(self.environment))
        if isinstance(node, IfStmt):
            cond = self.evaluate(node.condition)
            truthy = self.is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch)
            if node.else_branch is not None:
                return self.execute(node.else_branch)
            return None
        if isinstance(node, WhileStmt):
            while self.is_truthy(self.evaluate(node.condition)):
                result = self.execute(node.body)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        if isinstance(node, FunctionDecl):
            function = LoxFunction(node, self.environment, False)
            self.environment.define(node.name.lexeme, function)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name.lexeme}")
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value) if node.value is not None else None
            return ReturnSignal(value)
        if isinstance(node, ClassDecl):
            self.execute_class(node)
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_class(self, node: ClassDecl):
        superclass: Optional[LoxClass] = None
        if node.superclass is not None:
            value = self.evaluate(node.superclass)
            if not isinstance(value, LoxClass):
                raise LoxRuntimeError(node.superclass.name, 'Superclass must be a class.')
            superclass = value

        self.environment.define(node.name.lexeme, None)

        # Methods of a subclass close over an extra frame holding `super`.
        method_env = self.environment
        if superclass is not None:
            method_env = Environment(self.environment)
            method_env.define('super', superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in node.methods:
            is_initializer = method.name.lexeme == 'init'
            methods[method.name.lexeme] = LoxFunction(method, method_env, is_initializer)

        klass = LoxClass(node.name.lexeme, superclass, methods)
        self.environment.assign(node.name, klass)
        if self.debug_level >= 2:
            parent = f" < {superclass.name}" if superclass is not None else ''
            self.debug(f"define class {klass.name}{parent} with methods {sorted(methods)}")

    # Expressions

    def evaluate(self, node: Expr) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Grouping):
            return self.evaluate(node.expression)
        if isinstance(node, Variable):
            return self.look_up_variable(node.name, node)
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            distance = self.locals.get(node)
            if distance is not None:
                self.environment.assign_at(distance, node.name, value)
            else:
                self.globals.assign(node.name, value)
            return value
        if isinstance(node, Unary):
            right = self.evaluate(node.right)
            if node.op.type == 'BANG':
                return not self.is_truthy(right)
            if node.op.type == 'MINUS':
                self.check_number_operand(node.op, right)
                return -right
            raise LoxRuntimeError(node.op, f"Unsupported unary operator '{node.op.lexeme}'.")
        if isinstance(node, Logical):
            left = self.evaluate(node.left)
            if node.op.type == 'OR':
                if self.is_truthy(left):
                    return left
            elif not self.is_truthy(left):
                return left
            return self.evaluate(node.right)
        if isinstance(node, Binary):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Call):
            return self.evaluate_call(node)
        if isinstance(node, Get):
            obj = self.evaluate(node.obj)
            if isinstance(obj, LoxInstance):
                return obj.get(node.name)
            raise LoxRuntimeError(node.name, 'Only instances have properties.')
        if isinstance(node, Set):
            obj = self.evaluate(node.obj)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(node.name, 'Only instances have fields.')
            value = self.evaluate(node.value)
            obj.set(node.name, value)
            return value
        if isinstance(node, This):
            return self.look_up_variable(node.keyword, node)
        if isinstance(node, Super):
            distance = self.locals.get(node)
            if distance is None:
                # Only reachable when the resolver's table was not supplied.
                raise LoxRuntimeError(node.keyword, "Undefined variable 'super'.")
            superclass: LoxClass = self.environment.get_at(distance, 'super')
            # `this` lives in the frame just inside the one holding `super`.
            instance: LoxInstance = self.environment.get_at(distance - 1, 'this')
            method = superclass.find_method(node.method.lexeme)
            if method is None:
                raise LoxRuntimeError(node.method, f"Undefined property '{node.method.lexeme}'.")
            return method.bind(instance)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def evaluate_call(self, node: Call) -> Any:
        callee = self.evaluate(node.callee)
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(node.paren, 'Can only call functions and classes.')
        arguments = [self.evaluate(arg) for arg in node.arguments]
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(node.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        if self.debug_level >= 3:
            self.debug(f"call {to_string(callee)} with ({', '.join(to_string(a) for a in arguments)})")
        try:
            return callee.call(self, arguments)
        except RecursionError:
            # Raised again by the callers nearest the limit until one has
            # room to build the error.
            raise LoxRuntimeError(node.paren, 'Stack overflow.') from None

    def is_truthy(self, value: Any) -> bool:
        # Only nil and false are falsy; 0 and "" are truthy.
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    def check_number_operand(self, op: Token, operand: Any):
        if is_number(operand):
            return
        raise LoxRuntimeError(op, 'Operand must be a number.')

    def check_number_operands(self, op: Token, left: Any, right: Any):
        if is_number(left) and is_number(right):
            return
        raise LoxRuntimeError(op, 'Operands must be numbers.')

    def apply_binary_op(self, op: Token, a: Any, b: Any) -> Any:
        kind = op.type
        if kind == 'PLUS':
            if is_number(a) and is_number(b):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            raise LoxRuntimeError(op, 'Operands must be two numbers or two strings.')
        if kind == 'MINUS':
            self.check_number_operands(op, a, b)
            return a - b
        if kind == 'STAR':
            self.check_number_operands(op, a, b)
            return a * b
        if kind == 'SLASH':
            self.check_number_operands(op, a, b)
            return self.divide(a, b)
        if kind == 'GREATER':
            self.check_number_operands(op, a, b)
            return a > b
        if kind == 'GREATER_EQUAL':
            self.check_number_operands(op, a, b)
            return a >= b
        if kind == 'LESS':
            self.check_number_operands(op, a, b)
            return a < b
        if kind == 'LESS_EQUAL':
            self.check_number_operands(op, a, b)
            return a <= b
        if kind in ('EQUAL_EQUAL', 'BANG_EQUAL'):
            # Only numbers compare; any other pairing yields nil.
            if is_number(a) and is_number(b):
                return a == b if kind == 'EQUAL_EQUAL' else a != b
            return None
        raise LoxRuntimeError(op, f"Unsupported binary operator '{op.lexeme}'.")

    def divide(self, a: float, b: float) -> float:
        # IEEE-754 semantics: x/0 is +-Infinity, 0/0 is NaN.
        if b == 0.0:
            if a == 0.0 or math.isnan(a):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1.0, b)
        return a / b


def run_program(source: str, interpreter: Optional[Interpreter] = None, debug_level: int = 0) -> Interpreter:
    """Parse, resolve and run a Lox program from a source string.

    Passing an existing interpreter keeps its globals, which is how the REPL
    runs one line after another; the caller then owns closing it. An
    interpreter created here is closed before it is returned. Check
    ``interpreter.reporter`` afterwards for static or runtime errors.
    """
    if interpreter is not None:
        return _run_source(source, interpreter)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return _run_source(source, interpreter)
    finally:
        interpreter.close()


def _run_source(source: str, interpreter: Interpreter) -> Interpreter:
    interpreter.reporter.reset()
    statements = parse_program(source, interpreter.reporter)
    if statements is None:
        return interpreter
    return run_statements(statements, interpreter)


def run_statements(statements: List[Stmt], interpreter: Interpreter) -> Interpreter:
    """Resolve and run already-parsed statements.

    Nothing executes if resolution reported an error.
    """
    reporter = interpreter.reporter
    debug = interpreter.debug if interpreter.debug_level >= 2 else None
    resolver = Resolver(reporter, debug=debug)
    locals = resolver.resolve(statements)
    if reporter.had_error:
        return interpreter
    interpreter.interpret(statements, locals)
    return interpreter


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run a Lox file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return run_program(source, interpreter)
    finally:
        interpreter.close()
