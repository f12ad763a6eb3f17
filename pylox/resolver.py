"""Static scope resolution for Lox.

The resolver walks the whole program once before it runs. For every
variable reference (including ``this``, ``super`` and assignment targets)
it records how many scopes separate the reference from the scope that
declares the name. References it cannot find in any local scope are left
out of the table and are looked up dynamically in the globals.

It also rejects programs that are syntactically valid but meaningless:
reading a local in its own initializer, redeclaring a local in the same
scope, returning outside a function, and misusing ``this`` / ``super``.
Every problem is reported and the walk continues, so one pass surfaces as
many errors as possible.
"""

from __future__ import annotations

import enum
from typing import Callable, Dict, List, Optional

from .ast import (
    Token, Stmt, Expr, Block, ClassDecl, ExprStmt, FunctionDecl, IfStmt,
    PrintStmt, ReturnStmt, VarDecl, WhileStmt, Assign, Binary, Call, Get,
    Grouping, Literal, Logical, Set, Super, This, Unary, Variable,
)
from .errors import ErrorReporter


class FunctionType(enum.Enum):
    NONE = enum.auto()
    FUNCTION = enum.auto()
    INITIALIZER = enum.auto()
    METHOD = enum.auto()


class ClassType(enum.Enum):
    NONE = enum.auto()
    CLASS = enum.auto()
    SUBCLASS = enum.auto()


class Resolver:
    """Computes lexical distances for variable references."""
    def __init__(self, reporter: ErrorReporter, debug: Optional[Callable[[str], None]] = None):
        self.reporter = reporter
        self.debug = debug
        # Each scope maps a name to False (declared) or True (defined).
        self.scopes: List[Dict[str, bool]] = []
        self.locals: Dict[Expr, int] = {}
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements: List[Stmt]) -> Dict[Expr, int]:
        """Resolve a statement list and return the distance table."""
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    # Scopes

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.error(name, 'Already a variable with this name in this scope.')
            return
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = depth
                if self.debug is not None:
                    self.debug(f"resolve '{name.lexeme}' at distance {depth} (line {name.line})")
                return
        # Not found: leave unresolved, the interpreter treats it as a global.

    def resolve_function(self, function: FunctionDecl, kind: FunctionType):
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self.resolve_stmt(stmt)
        self.end_scope()
        self.current_function = enclosing_function

    # Statements

    def resolve_stmt(self, node: Stmt):
        if isinstance(node, Block):
            self.begin_scope()
            for stmt in node.statements:
                self.resolve_stmt(stmt)
            self.end_scope()
            return
        if isinstance(node, VarDecl):
            self.declare(node.name)
            if node.initializer is not None:
                self.resolve_expr(node.initializer)
            self.define(node.name)
            return
        if isinstance(node, FunctionDecl):
            # Defined before the body so the function can call itself.
            self.declare(node.name)
            self.define(node.name)
            self.resolve_function(node, FunctionType.FUNCTION)
            return
        if isinstance(node, ClassDecl):
            self.resolve_class(node)
            return
        if isinstance(node, ExprStmt):
            self.resolve_expr(node.expr)
            return
        if isinstance(node, IfStmt):
            self.resolve_expr(node.condition)
            self.resolve_stmt(node.then_branch)
            if node.else_branch is not None:
                self.resolve_stmt(node.else_branch)
            return
        if isinstance(node, PrintStmt):
            self.resolve_expr(node.value)
            return
        if isinstance(node, ReturnStmt):
            if self.current_function == FunctionType.NONE:
                self.reporter.error(node.keyword, "Can't return from top-level code.")
            if node.value is not None:
                if self.current_function == FunctionType.INITIALIZER:
                    self.reporter.error(node.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(node.value)
            return
        if isinstance(node, WhileStmt):
            self.resolve_expr(node.condition)
            self.resolve_stmt(node.body)
            return
        raise NotImplementedError(f"resolve: unexpected node type {type(node)}")

    def resolve_class(self, node: ClassDecl):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS
        self.declare(node.name)
        self.define(node.name)

        if node.superclass is not None:
            if node.superclass.name.lexeme == node.name.lexeme:
                self.reporter.error(node.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(node.superclass)
            self.begin_scope()
            self.scopes[-1]['super'] = True

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in node.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == 'init':
                kind = FunctionType.INITIALIZER
            self.resolve_function(method, kind)
        self.end_scope()

        if node.superclass is not None:
            self.end_scope()
        self.current_class = enclosing_class

    # Expressions

    def resolve_expr(self, node: Expr):
        if isinstance(node, Variable):
            if self.scopes and self.scopes[-1].get(node.name.lexeme) is False:
                self.reporter.error(node.name, "Can't read local variable in its own initializer.")
            self.resolve_local(node, node.name)
            return
        if isinstance(node, Assign):
            self.resolve_expr(node.value)
            self.resolve_local(node, node.name)
            return
        if isinstance(node, (Binary, Logical)):
            self.resolve_expr(node.left)
            self.resolve_expr(node.right)
            return
        if isinstance(node, Call):
            self.resolve_expr(node.callee)
            for arg in node.arguments:
                self.resolve_expr(arg)
            return
        if isinstance(node, Get):
            self.resolve_expr(node.obj)
            return
        if isinstance(node, Set):
            self.resolve_expr(node.value)
            self.resolve_expr(node.obj)
            return
        if isinstance(node, Grouping):
            self.resolve_expr(node.expression)
            return
        if isinstance(node, Unary):
            self.resolve_expr(node.right)
            return
        if isinstance(node, Literal):
            return
        if isinstance(node, This):
            if self.current_class == ClassType.NONE:
                self.reporter.error(node.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(node, node.keyword)
            return
        if isinstance(node, Super):
            if self.current_class == ClassType.NONE:
                self.reporter.error(node.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != ClassType.SUBCLASS:
                self.reporter.error(node.keyword, "Can't use 'super' in a class with no superclass.")
            self.resolve_local(node, node.keyword)
            return
        raise NotImplementedError(f"resolve: unexpected node type {type(node)}")
